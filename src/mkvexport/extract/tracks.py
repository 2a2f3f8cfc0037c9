"""Track extraction (``mkvextract SRC tracks ID:PATH ...``)."""

from __future__ import annotations

import logging
from pathlib import Path

from mkvexport.extract.base import (
    TRACK_IDENTITY_RE,
    DriverOutcome,
    DriverResult,
    ProgressCallback,
    StateAccess,
    ToolOptions,
    abort_batch,
    build_command,
    ensure_parent,
    run_batch,
)
from mkvexport.models import ExtractionState, FileMetadata, Track
from mkvexport.naming import track_output_path
from mkvexport.utils.tools import LineStream

logger = logging.getLogger(__name__)

CATEGORY = "tracks"


def _clear_path(track: Track) -> None:
    track.path = None


TRACK_ACCESS: StateAccess[Track] = StateAccess(
    get_state=lambda t: t.state,
    set_state=lambda t, s: t.set_state(s),
    clear_path=_clear_path,
)


def raw_mode_flags(options: ToolOptions) -> list[str]:
    if options.fullraw:
        return ["--fullraw"]
    if options.raw:
        return ["--raw"]
    return []


def extract_tracks(
    metadata: FileMetadata,
    *,
    pattern: str,
    output_dir: Path | None = None,
    options: ToolOptions | None = None,
    on_progress: ProgressCallback | None = None,
) -> DriverResult:
    """
    Extract every MARKED track of a file in a single mkvextract call.

    Tracks without a known output format stay MARKED and are reported as
    skipped.

    Args:
        metadata: Identified file with selection applied
        pattern: Track naming pattern (e.g. "$f_$i")
        output_dir: Output directory (default: next to the input file)
        options: mkvextract flags
        on_progress: Called with each percentage mkvextract reports

    Returns:
        DriverResult for the call (SKIPPED/EMPTY when nothing ran).
    """
    options = options or ToolOptions()

    marked = [t for t in metadata.tracks if t.state == ExtractionState.MARKED]
    for track in marked:
        if not track.extractable:
            logger.warning(
                f"{metadata.path.name}: no output format for codec {track.codec_id!r}, "
                f"skipping {track.display_name}"
            )
    selected = [t for t in marked if t.extractable]

    if not selected:
        logger.info(f"{metadata.path.name}: no tracks to extract")
        outcome = DriverOutcome.EMPTY if not metadata.tracks else DriverOutcome.SKIPPED
        return DriverResult(category=CATEGORY, outcome=outcome)

    specs: list[str] = []
    try:
        for track in selected:
            track.path = track_output_path(metadata, track, pattern, output_dir)
            ensure_parent(track.path)
            specs.append(f"{track.id}:{track.path}")
    except OSError as e:
        return abort_batch(selected, TRACK_ACCESS, e, category=CATEGORY, log=logger)

    stream = LineStream(
        build_command(
            options,
            metadata.path,
            "tracks",
            specs,
            mode_flags=raw_mode_flags(options),
        ),
        tail_size=options.tail_size,
    )
    logger.info(f"{metadata.path.name}: extracting {len(selected)} track(s)")
    return run_batch(
        stream,
        selected,
        TRACK_ACCESS,
        category=CATEGORY,
        identity_re=TRACK_IDENTITY_RE,
        log=logger,
        on_progress=on_progress,
    )
