"""Data models for mkvexport.

A FileMetadata is produced fresh for every input file by the identification
step and annotated in place by the selection and extraction steps. Nothing in
here runs subprocesses.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class TrackType(str, Enum):
    """Kind of stream stored in a Matroska track."""

    VIDEO = "video"
    AUDIO = "audio"
    SUBTITLES = "subtitles"


class ExtractionState(str, Enum):
    """Extraction lifecycle of a single asset.

    UNMARKED -> MARKED -> SUCCEEDED | FAILED. Terminal states never change.
    """

    UNMARKED = "unmarked"
    MARKED = "marked"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ExtractionState.SUCCEEDED, ExtractionState.FAILED)


_ALLOWED_TRANSITIONS: dict[ExtractionState, frozenset[ExtractionState]] = {
    ExtractionState.UNMARKED: frozenset({ExtractionState.MARKED}),
    ExtractionState.MARKED: frozenset({ExtractionState.SUCCEEDED, ExtractionState.FAILED}),
    ExtractionState.SUCCEEDED: frozenset(),
    ExtractionState.FAILED: frozenset(),
}


def advance_state(current: ExtractionState, target: ExtractionState) -> ExtractionState:
    """Return the state after attempting ``current -> target``.

    Illegal transitions (leaving a terminal state, skipping MARKED) keep the
    current state. Re-applying the current state is a no-op.
    """
    if target == current:
        return current
    if target in _ALLOWED_TRANSITIONS[current]:
        return target
    logger.debug(f"Ignoring state transition {current.value} -> {target.value}")
    return current


# Font extensions recognised by the "fonts" attachment selector
FONT_EXTENSIONS = frozenset({"ttf", "ttc", "otf", "fon"})


@dataclass
class Track:
    """One audio, video or subtitle track of a Matroska file."""

    id: int
    type: TrackType
    codec_id: str = ""
    codec: str = ""
    name: str | None = None
    language: str | None = None
    extension: str | None = None  # None => no known elementary stream format

    # Extraction annotations
    state: ExtractionState = ExtractionState.UNMARKED
    path: Path | None = None
    timecodes_state: ExtractionState = ExtractionState.UNMARKED
    timecodes_path: Path | None = None

    @property
    def extractable(self) -> bool:
        """Whether mkvextract can write this track to a standalone file."""
        return bool(self.extension)

    @property
    def display_name(self) -> str:
        """Short label used in logs and tables."""
        lang = f" [{self.language}]" if self.language else ""
        title = f" '{self.name}'" if self.name else ""
        return f"{self.type.value} track {self.id}{lang}{title}"

    def set_state(self, target: ExtractionState) -> ExtractionState:
        self.state = advance_state(self.state, target)
        return self.state

    def set_timecodes_state(self, target: ExtractionState) -> ExtractionState:
        self.timecodes_state = advance_state(self.timecodes_state, target)
        return self.timecodes_state

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "codec_id": self.codec_id,
            "codec": self.codec,
            "name": self.name,
            "language": self.language,
            "extension": self.extension,
            "extraction_state": self.state.value,
            "extraction_path": str(self.path) if self.path else None,
            "timecodes_extraction_state": self.timecodes_state.value,
            "timecodes_extraction_path": str(self.timecodes_path) if self.timecodes_path else None,
        }


@dataclass
class Attachment:
    """A file embedded in a Matroska container (fonts, cover art, ...).

    ``id`` is the 1-based attachment ID mkvextract expects on its command
    line; ``uid`` is the attachment's UID stored in the file.
    """

    id: int
    uid: int
    file_name: str
    mime_type: str = ""
    size: int = 0
    description: str | None = None

    state: ExtractionState = ExtractionState.UNMARKED
    path: Path | None = None

    @property
    def stem(self) -> str:
        """Stored filename without its extension."""
        return Path(self.file_name).stem

    @property
    def extension(self) -> str:
        """Extension of the stored filename, without dot (may be empty)."""
        return Path(self.file_name).suffix.lstrip(".")

    @property
    def is_font(self) -> bool:
        return self.extension.lower() in FONT_EXTENSIONS

    def set_state(self, target: ExtractionState) -> ExtractionState:
        self.state = advance_state(self.state, target)
        return self.state

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "uid": self.uid,
            "file_name": self.file_name,
            "mime_type": self.mime_type,
            "size": self.size,
            "description": self.description,
            "extraction_state": self.state.value,
            "extraction_path": str(self.path) if self.path else None,
        }


class ChapterFormat(str, Enum):
    """Chapter export formats supported by mkvextract."""

    XML = "xml"
    SIMPLE = "simple"

    @property
    def suffix(self) -> str:
        return ".xml" if self is ChapterFormat.XML else ".txt"


@dataclass
class ChapterExport:
    """Outcome of one requested chapter format for one file."""

    format: ChapterFormat
    state: ExtractionState = ExtractionState.MARKED
    path: Path | None = None
    message: str | None = None

    def set_state(self, target: ExtractionState) -> ExtractionState:
        self.state = advance_state(self.state, target)
        return self.state

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": self.format.value,
            "extraction_state": self.state.value,
            "extraction_path": str(self.path) if self.path else None,
            "message": self.message,
        }


@dataclass
class FileMetadata:
    """Identification result for one Matroska file plus extraction annotations."""

    path: Path
    title: str | None = None
    tracks: list[Track] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)
    chapters: list[ChapterExport] = field(default_factory=list)
    has_chapters: bool | None = None  # None => unknown
    container_type: str | None = None

    @property
    def basename(self) -> str:
        """Input filename without extension (the ``$f`` naming variable)."""
        return self.path.stem

    def track_by_id(self, track_id: int) -> Track | None:
        for track in self.tracks:
            if track.id == track_id:
                return track
        return None

    def tracks_by_type(self, track_type: TrackType | str) -> list[Track]:
        wanted = TrackType(track_type)
        return [t for t in self.tracks if t.type == wanted]

    def tracks_by_extension(self, extension: str) -> list[Track]:
        wanted = extension.lower().lstrip(".")
        return [t for t in self.tracks if t.extension and t.extension.lower() == wanted]

    def attachment_by_uid(self, uid: int) -> Attachment | None:
        for attachment in self.attachments:
            if attachment.uid == uid:
                return attachment
        return None

    def attachment_by_id(self, attachment_id: int) -> Attachment | None:
        for attachment in self.attachments:
            if attachment.id == attachment_id:
                return attachment
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize the annotated metadata (used for --json output)."""
        return {
            "path": str(self.path),
            "title": self.title,
            "container_type": self.container_type,
            "tracks": [t.to_dict() for t in self.tracks],
            "attachments": [a.to_dict() for a in self.attachments],
            "chapters": [c.to_dict() for c in self.chapters],
        }
