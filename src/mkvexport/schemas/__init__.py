"""Pydantic schemas for validating external tool output."""

from __future__ import annotations

from mkvexport.schemas.mkvmerge import (
    ContainerInfo,
    IdentifiedAttachment,
    IdentifiedTrack,
    Identification,
    validate_identification,
)

__all__ = [
    "ContainerInfo",
    "IdentifiedAttachment",
    "IdentifiedTrack",
    "Identification",
    "validate_identification",
]
