"""Tests for mkvexport data models."""

from __future__ import annotations

from pathlib import Path

import pytest

from mkvexport.models import (
    Attachment,
    ChapterExport,
    ChapterFormat,
    ExtractionState,
    FileMetadata,
    Track,
    TrackType,
    advance_state,
)

UNMARKED = ExtractionState.UNMARKED
MARKED = ExtractionState.MARKED
SUCCEEDED = ExtractionState.SUCCEEDED
FAILED = ExtractionState.FAILED


class TestAdvanceState:
    """State transitions only move forward."""

    @pytest.mark.parametrize(
        ("current", "target", "expected"),
        [
            (UNMARKED, MARKED, MARKED),
            (MARKED, SUCCEEDED, SUCCEEDED),
            (MARKED, FAILED, FAILED),
            (MARKED, MARKED, MARKED),
        ],
    )
    def test_allowed(
        self, current: ExtractionState, target: ExtractionState, expected: ExtractionState
    ) -> None:
        assert advance_state(current, target) == expected

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (UNMARKED, SUCCEEDED),
            (UNMARKED, FAILED),
            (SUCCEEDED, FAILED),
            (SUCCEEDED, MARKED),
            (SUCCEEDED, UNMARKED),
            (FAILED, SUCCEEDED),
            (FAILED, MARKED),
            (MARKED, UNMARKED),
        ],
    )
    def test_illegal_transition_keeps_state(
        self, current: ExtractionState, target: ExtractionState
    ) -> None:
        assert advance_state(current, target) == current

    def test_terminal_states(self) -> None:
        assert SUCCEEDED.is_terminal
        assert FAILED.is_terminal
        assert not MARKED.is_terminal
        assert not UNMARKED.is_terminal


class TestTrack:
    """Tests for Track."""

    def test_defaults(self) -> None:
        track = Track(id=3, type=TrackType.AUDIO)
        assert track.state == UNMARKED
        assert track.timecodes_state == UNMARKED
        assert track.path is None
        assert not track.extractable

    def test_track_and_timecode_states_are_independent(self) -> None:
        track = Track(id=0, type=TrackType.VIDEO, extension="h264")
        track.set_state(MARKED)
        track.set_state(SUCCEEDED)
        assert track.timecodes_state == UNMARKED

        track.set_timecodes_state(MARKED)
        track.set_timecodes_state(FAILED)
        assert track.state == SUCCEEDED
        assert track.timecodes_state == FAILED

    def test_terminal_state_is_final(self) -> None:
        track = Track(id=0, type=TrackType.VIDEO)
        track.set_state(MARKED)
        track.set_state(FAILED)
        assert track.set_state(SUCCEEDED) == FAILED
        assert track.set_state(MARKED) == FAILED

    def test_display_name(self) -> None:
        track = Track(id=2, type=TrackType.SUBTITLES, language="en", name="Signs")
        assert track.display_name == "subtitles track 2 [en] 'Signs'"

    def test_to_dict(self, tmp_path: Path) -> None:
        track = Track(id=1, type=TrackType.AUDIO, codec_id="A_AAC", extension="aac")
        track.set_state(MARKED)
        track.path = tmp_path / "movie_1.aac"

        data = track.to_dict()
        assert data["type"] == "audio"
        assert data["extraction_state"] == "marked"
        assert data["extraction_path"] == str(tmp_path / "movie_1.aac")
        assert data["timecodes_extraction_state"] == "unmarked"
        assert data["timecodes_extraction_path"] is None


class TestAttachment:
    """Tests for Attachment."""

    def test_stem_and_extension(self) -> None:
        attachment = Attachment(id=1, uid=99, file_name="Arial.Bold.ttf")
        assert attachment.stem == "Arial.Bold"
        assert attachment.extension == "ttf"

    def test_no_extension(self) -> None:
        attachment = Attachment(id=1, uid=99, file_name="README")
        assert attachment.stem == "README"
        assert attachment.extension == ""
        assert not attachment.is_font

    @pytest.mark.parametrize("name", ["a.ttf", "b.TTC", "c.otf", "d.Fon"])
    def test_fonts(self, name: str) -> None:
        assert Attachment(id=1, uid=1, file_name=name).is_font

    @pytest.mark.parametrize("name", ["cover.jpg", "font.ttf.txt", "ttf"])
    def test_not_fonts(self, name: str) -> None:
        assert not Attachment(id=1, uid=1, file_name=name).is_font


class TestChapterFormat:
    """Tests for ChapterFormat."""

    def test_suffix(self) -> None:
        assert ChapterFormat.XML.suffix == ".xml"
        assert ChapterFormat.SIMPLE.suffix == ".txt"

    def test_export_starts_marked(self) -> None:
        export = ChapterExport(format=ChapterFormat.XML)
        assert export.state == MARKED
        assert export.to_dict()["format"] == "xml"


class TestFileMetadata:
    """Lookups on FileMetadata."""

    @pytest.fixture
    def metadata(self, tmp_path: Path) -> FileMetadata:
        return FileMetadata(
            path=tmp_path / "Show S01E01.mkv",
            title="Pilot",
            tracks=[
                Track(id=0, type=TrackType.VIDEO, extension="h264"),
                Track(id=1, type=TrackType.AUDIO, extension="aac"),
                Track(id=4, type=TrackType.AUDIO, extension="ac3"),
                Track(id=5, type=TrackType.SUBTITLES, extension="ass"),
            ],
            attachments=[
                Attachment(id=1, uid=111, file_name="Arial.ttf"),
                Attachment(id=2, uid=222, file_name="cover.jpg"),
            ],
        )

    def test_basename(self, metadata: FileMetadata) -> None:
        assert metadata.basename == "Show S01E01"

    def test_track_by_id(self, metadata: FileMetadata) -> None:
        track = metadata.track_by_id(4)
        assert track is not None
        assert track.extension == "ac3"
        assert metadata.track_by_id(2) is None

    def test_tracks_by_type(self, metadata: FileMetadata) -> None:
        assert [t.id for t in metadata.tracks_by_type("audio")] == [1, 4]
        assert [t.id for t in metadata.tracks_by_type(TrackType.VIDEO)] == [0]

    def test_tracks_by_extension(self, metadata: FileMetadata) -> None:
        assert [t.id for t in metadata.tracks_by_extension(".ASS")] == [5]

    def test_attachment_lookups(self, metadata: FileMetadata) -> None:
        by_uid = metadata.attachment_by_uid(222)
        by_id = metadata.attachment_by_id(1)
        assert by_uid is not None and by_uid.file_name == "cover.jpg"
        assert by_id is not None and by_id.uid == 111
        assert metadata.attachment_by_uid(1) is None

    def test_to_dict(self, metadata: FileMetadata) -> None:
        data = metadata.to_dict()
        assert data["title"] == "Pilot"
        assert len(data["tracks"]) == 4
        assert data["attachments"][0]["uid"] == 111
        assert data["chapters"] == []
