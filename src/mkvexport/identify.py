"""
Matroska identification via ``mkvmerge -J``.

This module runs mkvmerge in JSON identification mode and converts the result
into a FileMetadata: tracks with their codec-derived output extensions,
attachments, chapter presence and the segment title.

Key functions:
    - run_mkvmerge_identify(): Execute mkvmerge and parse its JSON output
    - build_file_metadata(): Convert a validated Identification to FileMetadata
    - identify_file(): Both of the above for one path
    - extension_for_codec(): CodecID -> elementary stream extension
"""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from mkvexport.exceptions import IdentificationError, ToolNotFoundError
from mkvexport.models import Attachment, FileMetadata, Track, TrackType
from mkvexport.schemas.mkvmerge import Identification, validate_identification
from mkvexport.utils.retry import SUBPROCESS_EXCEPTIONS, RetryableError, retry_with_backoff

logger = logging.getLogger(__name__)


# =============================================================================
# Codec -> Extension
# =============================================================================

# Output formats mkvextract writes per CodecID. Keys ending in "/" match as
# prefixes (A_AAC/MPEG4/LC, A_PCM/INT/LIT, ...).
CODEC_EXTENSIONS: dict[str, str] = {
    # Video
    "V_MPEG4/ISO/AVC": "h264",
    "V_MPEGH/ISO/HEVC": "h265",
    "V_MPEGI/ISO/VVC": "h266",
    "V_MPEG1": "m1v",
    "V_MPEG2": "m2v",
    "V_MS/VFW/FOURCC": "avi",
    "V_REAL/": "rm",
    "V_THEORA": "ogv",
    "V_VP8": "ivf",
    "V_VP9": "ivf",
    "V_AV1": "ivf",
    # Audio
    "A_AAC": "aac",
    "A_AAC/": "aac",
    "A_AC3": "ac3",
    "A_AC3/": "ac3",
    "A_EAC3": "eac3",
    "A_DTS": "dts",
    "A_DTS/": "dts",
    "A_TRUEHD": "thd",
    "A_MLP": "mlp",
    "A_FLAC": "flac",
    "A_OPUS": "opus",
    "A_VORBIS": "ogg",
    "A_MPEG/L1": "mp1",
    "A_MPEG/L2": "mp2",
    "A_MPEG/L3": "mp3",
    "A_PCM/": "wav",
    "A_MS/ACM": "wav",
    "A_TTA1": "tta",
    "A_WAVPACK4": "wv",
    "A_ALAC": "caf",
    "A_REAL/": "ra",
    # Subtitles
    "S_TEXT/UTF8": "srt",
    "S_TEXT/ASCII": "srt",
    "S_TEXT/SSA": "ssa",
    "S_TEXT/ASS": "ass",
    "S_SSA": "ssa",
    "S_ASS": "ass",
    "S_TEXT/WEBVTT": "vtt",
    "S_TEXT/USF": "usf",
    "S_VOBSUB": "sub",
    "S_HDMV/PGS": "sup",
    "S_HDMV/TEXTST": "textst",
    "S_KATE": "ogg",
}

_TRACK_TYPES: dict[str, TrackType] = {
    "video": TrackType.VIDEO,
    "audio": TrackType.AUDIO,
    "subtitles": TrackType.SUBTITLES,
}


def extension_for_codec(codec_id: str | None) -> str | None:
    """
    Map a Matroska CodecID to the extension mkvextract writes for it.

    Args:
        codec_id: CodecID such as "V_MPEG4/ISO/AVC" or "A_AAC/MPEG4/LC"

    Returns:
        Extension without dot, or None if the codec cannot be extracted
        to a standalone file.

    Example:
        >>> extension_for_codec("A_AAC/MPEG4/LC")
        'aac'
    """
    if not codec_id:
        return None
    codec = codec_id.strip().upper()
    if codec in CODEC_EXTENSIONS:
        return CODEC_EXTENSIONS[codec]

    prefixes = sorted((k for k in CODEC_EXTENSIONS if k.endswith("/")), key=len, reverse=True)
    for prefix in prefixes:
        if codec.startswith(prefix):
            return CODEC_EXTENSIONS[prefix]
    return None


# =============================================================================
# mkvmerge Execution
# =============================================================================


@retry_with_backoff(
    max_retries=2,
    base_delay=1.0,
    max_delay=10.0,
    exceptions=SUBPROCESS_EXCEPTIONS,
)
def _run_mkvmerge_subprocess(cmd: list[str], timeout: int) -> subprocess.CompletedProcess[str]:
    """Run mkvmerge subprocess with retry on transient failures."""
    result = subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        check=False,
        timeout=timeout,
    )
    if result.returncode < 0:
        raise RetryableError(f"mkvmerge was terminated by signal {-result.returncode}")
    return result


def run_mkvmerge_identify(
    file_path: Path,
    mkvmerge: str = "mkvmerge",
    timeout: int = 60,
) -> dict[str, Any]:
    """
    Run ``mkvmerge -J`` on a file and return the parsed JSON document.

    Args:
        file_path: Matroska file to identify
        mkvmerge: mkvmerge binary (resolved path or name)
        timeout: Seconds before the call is abandoned (then retried)

    Returns:
        Parsed identification JSON.

    Raises:
        ToolNotFoundError: If mkvmerge cannot be started.
        IdentificationError: If mkvmerge fails or prints invalid JSON.
    """
    if not file_path.exists():
        raise IdentificationError(f"File not found: {file_path}", file_path=file_path)

    cmd = [mkvmerge, "-J", str(file_path)]
    logger.debug(f"Running mkvmerge: {' '.join(cmd)}")

    try:
        result = _run_mkvmerge_subprocess(cmd, timeout)
    except FileNotFoundError as e:
        raise ToolNotFoundError(f"mkvmerge binary not found: {mkvmerge}", tool="mkvmerge") from e
    except subprocess.TimeoutExpired as e:
        raise IdentificationError(
            f"mkvmerge timed out after {timeout}s", file_path=file_path, command=" ".join(cmd)
        ) from e
    except RetryableError as e:
        raise IdentificationError(str(e), file_path=file_path, command=" ".join(cmd)) from e

    # mkvmerge exits 1 on warnings; the JSON is still complete
    if result.returncode not in (0, 1):
        raise IdentificationError(
            f"mkvmerge failed with exit code {result.returncode}",
            file_path=file_path,
            command=" ".join(cmd),
            return_code=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )

    try:
        data: dict[str, Any] = json.loads(result.stdout)
    except json.JSONDecodeError as e:
        raise IdentificationError(
            f"Failed to parse mkvmerge JSON output: {e}",
            file_path=file_path,
            stdout=result.stdout[:500],
        ) from e

    return data


# =============================================================================
# Conversion
# =============================================================================


def build_file_metadata(file_path: Path, identification: Identification) -> FileMetadata:
    """
    Convert validated identification output into a FileMetadata.

    Track types other than video/audio/subtitles (e.g. menu buttons) are
    dropped. Tracks with an unknown CodecID keep ``extension=None``.
    """
    tracks: list[Track] = []
    for item in identification.tracks:
        track_type = _TRACK_TYPES.get(item.type)
        if track_type is None:
            logger.debug(f"Ignoring track {item.id} of type {item.type!r} in {file_path.name}")
            continue

        props = item.properties
        extension = extension_for_codec(props.codec_id)
        if extension is None:
            logger.debug(
                f"No extraction format for codec {props.codec_id!r} "
                f"(track {item.id} in {file_path.name})"
            )

        tracks.append(
            Track(
                id=item.id,
                type=track_type,
                codec_id=props.codec_id,
                codec=item.codec,
                name=props.track_name or None,
                language=props.language_ietf or props.language or None,
                extension=extension,
            )
        )

    attachments = [
        Attachment(
            id=item.id,
            uid=item.properties.uid if item.properties.uid is not None else item.id,
            file_name=item.file_name or f"attachment_{item.id}",
            mime_type=item.content_type or "",
            size=item.size,
            description=item.description or None,
        )
        for item in identification.attachments
    ]

    return FileMetadata(
        path=file_path,
        title=identification.container.properties.title or None,
        tracks=tracks,
        attachments=attachments,
        has_chapters=identification.chapter_count > 0,
        container_type=identification.container.type,
    )


def identify_file(
    file_path: Path | str,
    mkvmerge: str = "mkvmerge",
    timeout: int = 60,
) -> FileMetadata:
    """
    Identify a Matroska file.

    Raises:
        ToolNotFoundError: If mkvmerge cannot be started.
        IdentificationError: If the file cannot be identified.
    """
    path = Path(file_path)
    data = run_mkvmerge_identify(path, mkvmerge=mkvmerge, timeout=timeout)

    try:
        identification = validate_identification(data)
    except ValidationError as e:
        raise IdentificationError(
            f"Unexpected mkvmerge output: {e.error_count()} validation error(s)",
            file_path=path,
        ) from e

    if not identification.container.recognized or not identification.container.supported:
        reason = "; ".join(identification.errors) or "container not recognized"
        raise IdentificationError(f"Not a supported Matroska file: {reason}", file_path=path)

    for warning in identification.warnings:
        logger.warning(f"{path.name}: {warning}")

    metadata = build_file_metadata(path, identification)
    logger.info(
        f"Identified {path.name}: {len(metadata.tracks)} track(s), "
        f"{len(metadata.attachments)} attachment(s)"
    )
    return metadata
