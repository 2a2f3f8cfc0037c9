"""Shared pytest fixtures and helpers for mkvexport tests."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from mkvexport.config import clear_settings
from mkvexport.models import Attachment, FileMetadata, Track, TrackType


class FakeProcess:
    """Stand-in for subprocess.Popen producing scripted output lines."""

    def __init__(self, lines: list[str], returncode: int = 0) -> None:
        self.stdout = iter(line + "\n" for line in lines)
        self.returncode = returncode

    def wait(self) -> int:
        return self.returncode

    def __enter__(self) -> FakeProcess:
        return self

    def __exit__(self, *args: object) -> None:
        return None


class ToolScript:
    """Queue of scripted mkvextract runs; records every command line.

    Example:
        tool_script.add(["Progress: 100%"])
        extract_tracks(...)
        assert tool_script.calls[0][2] == "tracks"
    """

    def __init__(self) -> None:
        self.runs: list[tuple[list[str], int] | OSError] = []
        self.calls: list[list[str]] = []

    def add(self, lines: list[str], returncode: int = 0) -> ToolScript:
        self.runs.append((lines, returncode))
        return self

    def fail(self, error: OSError) -> ToolScript:
        """Make the next invocation fail to start with ``error``."""
        self.runs.append(error)
        return self

    def popen(self, argv: list[str], **kwargs: Any) -> FakeProcess:
        self.calls.append(list(argv))
        if not self.runs:
            raise AssertionError(f"Unexpected tool invocation: {argv}")
        run = self.runs.pop(0)
        if isinstance(run, OSError):
            raise run
        lines, returncode = run
        return FakeProcess(lines, returncode)


@pytest.fixture
def tool_script() -> Iterator[ToolScript]:
    """Patch subprocess.Popen used by LineStream with a ToolScript."""
    script = ToolScript()
    with patch("mkvexport.utils.tools.subprocess.Popen", side_effect=script.popen):
        yield script


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Drop MKVEXPORT_* variables and cached settings around every test."""
    for key in list(os.environ):
        if key.startswith("MKVEXPORT_"):
            monkeypatch.delenv(key)
    clear_settings()
    yield
    clear_settings()


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    """Undo setup_logging() calls made by CLI tests."""
    yield
    package_logger = logging.getLogger("mkvexport")
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)


def make_identification(
    *,
    tracks: list[dict[str, Any]] | None = None,
    attachments: list[dict[str, Any]] | None = None,
    chapters: int = 0,
    title: str | None = None,
    recognized: bool = True,
) -> dict[str, Any]:
    """Build a ``mkvmerge -J`` document.

    Args:
        tracks: Track entries (id, type, codec, properties)
        attachments: Attachment entries (id, file_name, content_type, size, properties)
        chapters: Number of chapter entries (0 = no chapters)
        title: Segment title
        recognized: Whether mkvmerge recognized the container
    """
    return {
        "file_name": "movie.mkv",
        "container": {
            "type": "Matroska",
            "recognized": recognized,
            "supported": recognized,
            "properties": {"title": title} if title else {},
        },
        "tracks": tracks or [],
        "attachments": attachments or [],
        "chapters": [{"num_entries": chapters}] if chapters else [],
        "errors": [],
        "warnings": [],
    }


def json_track(
    track_id: int,
    track_type: str = "video",
    codec_id: str = "V_MPEG4/ISO/AVC",
    **properties: Any,
) -> dict[str, Any]:
    return {
        "id": track_id,
        "type": track_type,
        "codec": codec_id,
        "properties": {"codec_id": codec_id, **properties},
    }


def json_attachment(
    attachment_id: int,
    file_name: str,
    uid: int,
    content_type: str = "font/ttf",
    size: int = 1024,
) -> dict[str, Any]:
    return {
        "id": attachment_id,
        "file_name": file_name,
        "content_type": content_type,
        "size": size,
        "properties": {"uid": uid},
    }


def make_metadata(
    path: Path,
    *,
    tracks: list[Track] | None = None,
    attachments: list[Attachment] | None = None,
    title: str | None = None,
    has_chapters: bool | None = None,
) -> FileMetadata:
    """FileMetadata for ``path`` without running mkvmerge."""
    return FileMetadata(
        path=path,
        title=title,
        tracks=tracks or [],
        attachments=attachments or [],
        has_chapters=has_chapters,
        container_type="Matroska",
    )


def video_track(track_id: int, extension: str | None = "h264", **kwargs: Any) -> Track:
    return Track(
        id=track_id,
        type=TrackType.VIDEO,
        codec_id="V_MPEG4/ISO/AVC",
        extension=extension,
        **kwargs,
    )


@pytest.fixture
def movie(tmp_path: Path) -> Path:
    """An (empty) input file; mkvmerge/mkvextract are always mocked."""
    path = tmp_path / "movie.mkv"
    path.write_bytes(b"")
    return path
