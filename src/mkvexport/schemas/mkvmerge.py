"""Pydantic models for ``mkvmerge -J`` identification output.

Only the fields mkvexport consumes are modelled; everything else in the
identification JSON is ignored.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, computed_field


class TrackProperties(BaseModel):
    """Per-track ``properties`` object."""

    codec_id: str = ""
    language: str | None = None
    language_ietf: str | None = None
    track_name: str | None = None
    uid: int | None = None

    model_config = {"extra": "ignore"}


class IdentifiedTrack(BaseModel):
    """Single entry of the ``tracks`` array."""

    id: int = Field(ge=0)
    type: str
    codec: str = ""
    properties: TrackProperties = Field(default_factory=TrackProperties)

    model_config = {"extra": "ignore"}


class AttachmentProperties(BaseModel):
    uid: int | None = None

    model_config = {"extra": "ignore"}


class IdentifiedAttachment(BaseModel):
    """Single entry of the ``attachments`` array.

    ``id`` is 1-based and is what mkvextract expects on the command line.
    """

    id: int = Field(ge=1)
    file_name: str = ""
    content_type: str | None = None
    description: str | None = None
    size: int = Field(default=0, ge=0)
    properties: AttachmentProperties = Field(default_factory=AttachmentProperties)

    model_config = {"extra": "ignore"}


class ChapterSummary(BaseModel):
    num_entries: int = Field(default=0, ge=0)

    model_config = {"extra": "ignore"}


class ContainerProperties(BaseModel):
    title: str | None = None

    model_config = {"extra": "ignore"}


class ContainerInfo(BaseModel):
    type: str | None = None
    recognized: bool = False
    supported: bool = False
    properties: ContainerProperties = Field(default_factory=ContainerProperties)

    model_config = {"extra": "ignore"}


class Identification(BaseModel):
    """Top-level ``mkvmerge -J`` document."""

    file_name: str = ""
    container: ContainerInfo = Field(default_factory=ContainerInfo)
    tracks: list[IdentifiedTrack] = Field(default_factory=list)
    attachments: list[IdentifiedAttachment] = Field(default_factory=list)
    chapters: list[ChapterSummary] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def chapter_count(self) -> int:
        """Total number of chapter entries across all editions."""
        return sum(c.num_entries for c in self.chapters)


def validate_identification(data: dict[str, Any]) -> Identification:
    """
    Validate and create Identification from the raw ``mkvmerge -J`` dict.

    Raises:
        pydantic.ValidationError: If validation fails.
    """
    return Identification.model_validate(data)
