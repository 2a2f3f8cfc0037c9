"""Selection of tracks, attachments, timecodes and chapter formats.

Selectors are comma-delimited user tokens. For tracks and timecodes they are
``all``, ``none``, a track type (``video``, ``audio``, ``subtitles``) or a
bare track ID; for attachments ``all``, ``none`` or ``fonts``. Matching
entities move to MARKED; marking is idempotent and the effects of all tokens
are unioned.

Unsupported tokens never abort a selection: each one is returned as a
SelectorError and the remaining tokens still apply.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence

from mkvexport.exceptions import SelectorError
from mkvexport.models import (
    Attachment,
    ChapterFormat,
    ExtractionState,
    Track,
    TrackType,
)

logger = logging.getLogger(__name__)

ALL = "all"
NONE = "none"
FONTS = "fonts"

TRACK_TYPE_NAMES = frozenset(t.value for t in TrackType)

Selectors = str | Iterable[str] | None


def parse_selectors(selectors: Selectors) -> list[str]:
    """
    Normalize selectors into a list of lowercase tokens.

    Accepts a comma-delimited string or an iterable of such strings.

    Example:
        >>> parse_selectors("video, 2,,Audio")
        ['video', '2', 'audio']
        >>> parse_selectors(["1,2", "subtitles"])
        ['1', '2', 'subtitles']
    """
    if selectors is None:
        return []
    if isinstance(selectors, str):
        selectors = [selectors]

    tokens: list[str] = []
    for chunk in selectors:
        for token in chunk.split(","):
            token = token.strip().lower()
            if token:
                tokens.append(token)
    return tokens


def _mark_track(track: Track) -> None:
    track.set_state(ExtractionState.MARKED)


def _mark_timecodes(track: Track) -> None:
    track.set_timecodes_state(ExtractionState.MARKED)


def _select_tracks(
    tracks: Sequence[Track | None],
    selectors: Selectors,
    mark: Callable[[Track], None],
    category: str,
) -> list[SelectorError]:
    tokens = parse_selectors(selectors)
    present = [t for t in tracks if t is not None]

    if ALL in tokens:
        for track in present:
            mark(track)
        return []
    if not tokens or NONE in tokens:
        return []

    errors: list[SelectorError] = []
    for token in tokens:
        if token.isdecimal():
            track_id = int(token)
            matches = [t for t in present if t.id == track_id]
            if not matches:
                logger.debug(f"No track with ID {track_id} for {category} selection")
        elif token in TRACK_TYPE_NAMES:
            matches = [t for t in present if t.type.value == token]
        else:
            errors.append(
                SelectorError(
                    f"Unsupported {category} selector: {token!r} "
                    f"(use all, none, video, audio, subtitles or a track ID)",
                    token=token,
                    category=category,
                )
            )
            continue

        for track in matches:
            mark(track)

    return errors


def select_tracks(tracks: Sequence[Track | None], selectors: Selectors) -> list[SelectorError]:
    """
    Mark tracks for extraction.

    Args:
        tracks: Tracks of one file (None entries are skipped)
        selectors: Track selectors

    Returns:
        One SelectorError per unsupported token (empty if all were valid).
    """
    return _select_tracks(tracks, selectors, _mark_track, "track")


def select_timecodes(tracks: Sequence[Track | None], selectors: Selectors) -> list[SelectorError]:
    """Mark tracks for timecode extraction. Same vocabulary as select_tracks()."""
    return _select_tracks(tracks, selectors, _mark_timecodes, "timecode")


def select_attachments(
    attachments: Sequence[Attachment | None],
    selectors: Selectors,
) -> list[SelectorError]:
    """
    Mark attachments for extraction.

    ``fonts`` marks attachments whose filename ends in ttf, ttc, otf or fon
    (case-insensitive).
    """
    tokens = parse_selectors(selectors)
    present = [a for a in attachments if a is not None]

    if ALL in tokens:
        for attachment in present:
            attachment.set_state(ExtractionState.MARKED)
        return []
    if not tokens or NONE in tokens:
        return []

    errors: list[SelectorError] = []
    for token in tokens:
        if token == FONTS:
            for attachment in present:
                if attachment.is_font:
                    attachment.set_state(ExtractionState.MARKED)
        else:
            errors.append(
                SelectorError(
                    f"Unsupported attachment selector: {token!r} (use all, none or fonts)",
                    token=token,
                    category="attachment",
                )
            )
    return errors


def parse_chapter_formats(selectors: Selectors) -> tuple[list[ChapterFormat], list[SelectorError]]:
    """
    Resolve chapter type tokens into formats.

    ``none`` (or nothing) requests no chapters. Duplicates collapse,
    request order is kept.

    Returns:
        (formats, errors) where errors hold one SelectorError per
        unsupported token.

    Example:
        >>> formats, errors = parse_chapter_formats("xml,foo,simple")
        >>> [f.value for f in formats], [e.token for e in errors]
        (['xml', 'simple'], ['foo'])
    """
    formats: list[ChapterFormat] = []
    errors: list[SelectorError] = []
    for token in parse_selectors(selectors):
        if token == NONE:
            continue
        try:
            fmt = ChapterFormat(token)
        except ValueError:
            errors.append(
                SelectorError(
                    f"Unsupported chapter type: {token!r} (use xml, simple or none)",
                    token=token,
                    category="chapter",
                )
            )
            continue
        if fmt not in formats:
            formats.append(fmt)

    if NONE in parse_selectors(selectors):
        formats = []
    return formats, errors
