"""Output filename patterns.

Patterns are literal text with single-letter variables:

    ========  ======================================  =====================
    variable  tracks / timecodes                      attachments / chapters
    ========  ======================================  =====================
    ``$f``    input basename                          input basename
    ``$i``    track ID                                attachment UID (att.)
    ``$t``    track type                              -
    ``$n``    track name                              stored name without
                                                      extension (att.),
                                                      segment title (chap.)
    ``$l``    language                                -
    ``$v``    "v2" (timecodes only)                   -
    ========  ======================================  =====================

Variables are matched as literal text in a single left-to-right pass, so a
substituted value is never expanded again. Unbound variables become empty
strings; any other ``$`` sequence is kept as-is. Substituted values are sanitized for the file system; literal ``/``
in the pattern itself still creates sub-directories.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from pathvalidate import sanitize_filename

from mkvexport.models import Attachment, ChapterFormat, FileMetadata, Track

VARIABLE_PREFIX = "$"
TIMECODE_VERSION_TAG = "v2"

# Every variable letter any category understands
PATTERN_VARIABLES = "fitnlv"


def _clean_value(value: object | None) -> str:
    if value is None:
        return ""
    return sanitize_filename(str(value), replacement_text="_")


def resolve_pattern(pattern: str, bindings: Mapping[str, object | None]) -> str:
    """
    Expand a naming pattern.

    Args:
        pattern: Template such as "$f_$i"
        bindings: Variable letter -> value, e.g. {"f": "movie", "i": 2}

    Returns:
        The expanded template (no directory, no extension).

    Example:
        >>> resolve_pattern("$f_$i", {"f": "movie", "i": "2"})
        'movie_2'
        >>> resolve_pattern("$f [$l]", {"f": "movie"})
        'movie []'
    """
    tokens = {f"{VARIABLE_PREFIX}{key}": "" for key in PATTERN_VARIABLES}
    tokens.update(
        {f"{VARIABLE_PREFIX}{key}": _clean_value(value) for key, value in bindings.items()}
    )
    token_length = len(VARIABLE_PREFIX) + 1

    out: list[str] = []
    i = 0
    while i < len(pattern):
        candidate = pattern[i : i + token_length]
        if candidate in tokens:
            out.append(tokens[candidate])
            i += token_length
        else:
            out.append(pattern[i])
            i += 1
    return "".join(out)


def output_root(input_path: Path, output_dir: Path | None) -> Path:
    """Directory extracted files go to: output_dir, else the input's directory."""
    return Path(output_dir) if output_dir is not None else input_path.parent


def _join(root: Path, resolved: str, extension: str | None) -> Path:
    name = f"{resolved}.{extension}" if extension else resolved
    return root / name


# =============================================================================
# Bindings per category
# =============================================================================


def track_bindings(metadata: FileMetadata, track: Track) -> dict[str, object | None]:
    return {
        "f": metadata.basename,
        "i": track.id,
        "t": track.type.value,
        "n": track.name,
        "l": track.language,
    }


def timecode_bindings(metadata: FileMetadata, track: Track) -> dict[str, object | None]:
    bindings = track_bindings(metadata, track)
    bindings["v"] = TIMECODE_VERSION_TAG
    return bindings


def attachment_bindings(metadata: FileMetadata, attachment: Attachment) -> dict[str, object | None]:
    return {
        "f": metadata.basename,
        "i": attachment.uid,
        "n": attachment.stem,
    }


def chapter_bindings(metadata: FileMetadata) -> dict[str, object | None]:
    return {
        "f": metadata.basename,
        "n": metadata.title,
    }


# =============================================================================
# Output paths
# =============================================================================


def track_output_path(
    metadata: FileMetadata,
    track: Track,
    pattern: str,
    output_dir: Path | None = None,
) -> Path:
    """Resolve the output file of a track (suffixed with its codec extension)."""
    resolved = resolve_pattern(pattern, track_bindings(metadata, track))
    return _join(output_root(metadata.path, output_dir), resolved, track.extension)


def timecode_output_path(
    metadata: FileMetadata,
    track: Track,
    pattern: str,
    output_dir: Path | None = None,
) -> Path:
    """Resolve the timecode file of a track (always ``.txt``)."""
    resolved = resolve_pattern(pattern, timecode_bindings(metadata, track))
    return _join(output_root(metadata.path, output_dir), resolved, "txt")


def attachment_output_path(
    metadata: FileMetadata,
    attachment: Attachment,
    pattern: str,
    output_dir: Path | None = None,
) -> Path:
    """Resolve the output file of an attachment (keeps its stored extension)."""
    resolved = resolve_pattern(pattern, attachment_bindings(metadata, attachment))
    return _join(output_root(metadata.path, output_dir), resolved, attachment.extension or None)


def chapter_output_path(
    metadata: FileMetadata,
    chapter_format: ChapterFormat,
    pattern: str,
    output_dir: Path | None = None,
) -> Path:
    """Resolve the chapter file (``.xml`` for XML, ``.txt`` for simple)."""
    resolved = resolve_pattern(pattern, chapter_bindings(metadata))
    return _join(
        output_root(metadata.path, output_dir),
        resolved,
        chapter_format.suffix.lstrip("."),
    )
