"""Timecode extraction (``mkvextract SRC timestamps_v2 ID:PATH ...``)."""

from __future__ import annotations

import logging
from pathlib import Path

from mkvexport.extract.base import (
    TIMECODE_IDENTITY_RE,
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
from mkvexport.naming import timecode_output_path
from mkvexport.utils.tools import LineStream

logger = logging.getLogger(__name__)

CATEGORY = "timecodes"
MODE = "timestamps_v2"


def _clear_path(track: Track) -> None:
    track.timecodes_path = None


TIMECODE_ACCESS: StateAccess[Track] = StateAccess(
    get_state=lambda t: t.timecodes_state,
    set_state=lambda t, s: t.set_timecodes_state(s),
    clear_path=_clear_path,
)


def extract_timecodes(
    metadata: FileMetadata,
    *,
    pattern: str,
    output_dir: Path | None = None,
    options: ToolOptions | None = None,
    on_progress: ProgressCallback | None = None,
) -> DriverResult:
    """Extract v2 timecode files for every track whose timecodes are MARKED."""
    options = options or ToolOptions()

    selected = [t for t in metadata.tracks if t.timecodes_state == ExtractionState.MARKED]
    if not selected:
        logger.info(f"{metadata.path.name}: no timecodes to extract")
        outcome = DriverOutcome.EMPTY if not metadata.tracks else DriverOutcome.SKIPPED
        return DriverResult(category=CATEGORY, outcome=outcome)

    specs: list[str] = []
    try:
        for track in selected:
            track.timecodes_path = timecode_output_path(metadata, track, pattern, output_dir)
            ensure_parent(track.timecodes_path)
            specs.append(f"{track.id}:{track.timecodes_path}")
    except OSError as e:
        return abort_batch(selected, TIMECODE_ACCESS, e, category=CATEGORY, log=logger)

    stream = LineStream(
        build_command(options, metadata.path, MODE, specs),
        tail_size=options.tail_size,
    )
    logger.info(f"{metadata.path.name}: extracting timecodes of {len(selected)} track(s)")
    return run_batch(
        stream,
        selected,
        TIMECODE_ACCESS,
        category=CATEGORY,
        identity_re=TIMECODE_IDENTITY_RE,
        log=logger,
        on_progress=on_progress,
    )
