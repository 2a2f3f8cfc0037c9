"""Tests for track/attachment/timecode selection and chapter formats."""

from __future__ import annotations

import pytest

from mkvexport.models import Attachment, ChapterFormat, ExtractionState, Track, TrackType
from mkvexport.selection import (
    parse_chapter_formats,
    parse_selectors,
    select_attachments,
    select_timecodes,
    select_tracks,
)

MARKED = ExtractionState.MARKED
UNMARKED = ExtractionState.UNMARKED


def make_tracks() -> list[Track]:
    return [
        Track(id=0, type=TrackType.VIDEO),
        Track(id=1, type=TrackType.AUDIO),
        Track(id=2, type=TrackType.AUDIO),
        Track(id=7, type=TrackType.SUBTITLES),
    ]


def marked_ids(tracks: list[Track]) -> list[int]:
    return [t.id for t in tracks if t.state == MARKED]


class TestParseSelectors:
    """Tests for parse_selectors."""

    def test_comma_string(self) -> None:
        assert parse_selectors("video, 2,,Audio") == ["video", "2", "audio"]

    def test_list_of_chunks(self) -> None:
        assert parse_selectors(["1,2", "subtitles"]) == ["1", "2", "subtitles"]

    def test_none(self) -> None:
        assert parse_selectors(None) == []


class TestSelectTracks:
    """Tests for select_tracks."""

    def test_all_marks_everything(self) -> None:
        tracks = make_tracks()
        assert select_tracks(tracks, "all") == []
        assert marked_ids(tracks) == [0, 1, 2, 7]

    def test_all_equals_every_type(self) -> None:
        by_all = make_tracks()
        by_types = make_tracks()
        select_tracks(by_all, "all")
        select_tracks(by_types, "video,audio,subtitles")
        assert marked_ids(by_all) == marked_ids(by_types)

    def test_all_skips_missing_entries(self) -> None:
        tracks = make_tracks()
        select_tracks([None, *tracks], "all")
        assert marked_ids(tracks) == [0, 1, 2, 7]

    @pytest.mark.parametrize("selectors", ["none", "", None, [], "audio,none"])
    def test_none_or_empty_marks_nothing(self, selectors: str | list[str] | None) -> None:
        tracks = make_tracks()
        assert select_tracks(tracks, selectors) == []
        assert marked_ids(tracks) == []

    def test_by_type(self) -> None:
        tracks = make_tracks()
        select_tracks(tracks, "audio")
        assert marked_ids(tracks) == [1, 2]

    def test_by_id(self) -> None:
        tracks = make_tracks()
        select_tracks(tracks, "7,0")
        assert marked_ids(tracks) == [0, 7]

    def test_unknown_id_is_ignored(self) -> None:
        tracks = make_tracks()
        assert select_tracks(tracks, "42") == []
        assert marked_ids(tracks) == []

    def test_union_is_idempotent(self) -> None:
        tracks = make_tracks()
        select_tracks(tracks, "audio,1,1")
        select_tracks(tracks, "1")
        assert marked_ids(tracks) == [1, 2]
        assert all(t.state in (MARKED, UNMARKED) for t in tracks)

    def test_unsupported_token_reported_others_applied(self) -> None:
        tracks = make_tracks()
        errors = select_tracks(tracks, "video,chapters,-1")
        assert marked_ids(tracks) == [0]
        assert [e.token for e in errors] == ["chapters", "-1"]
        assert all(e.category == "track" for e in errors)

    def test_does_not_touch_timecodes(self) -> None:
        tracks = make_tracks()
        select_tracks(tracks, "all")
        assert all(t.timecodes_state == UNMARKED for t in tracks)


class TestSelectTimecodes:
    """Tests for select_timecodes."""

    def test_marks_timecode_state_only(self) -> None:
        tracks = make_tracks()
        errors = select_timecodes(tracks, "video")
        assert errors == []
        assert tracks[0].timecodes_state == MARKED
        assert tracks[0].state == UNMARKED

    def test_error_category(self) -> None:
        errors = select_timecodes(make_tracks(), "fonts")
        assert errors[0].category == "timecode"


class TestSelectAttachments:
    """Tests for select_attachments."""

    @pytest.fixture
    def attachments(self) -> list[Attachment]:
        return [
            Attachment(id=1, uid=10, file_name="Arial.ttf"),
            Attachment(id=2, uid=20, file_name="cover.jpg"),
            Attachment(id=3, uid=30, file_name="Meiryo.TTC"),
        ]

    def test_fonts(self, attachments: list[Attachment]) -> None:
        assert select_attachments(attachments, "fonts") == []
        assert [a.state for a in attachments] == [MARKED, UNMARKED, MARKED]

    def test_all(self, attachments: list[Attachment]) -> None:
        select_attachments([None, *attachments], "all")
        assert all(a.state == MARKED for a in attachments)

    def test_none(self, attachments: list[Attachment]) -> None:
        select_attachments(attachments, "none")
        assert all(a.state == UNMARKED for a in attachments)

    def test_unsupported(self, attachments: list[Attachment]) -> None:
        errors = select_attachments(attachments, "fonts,images")
        assert [e.token for e in errors] == ["images"]
        assert attachments[0].state == MARKED


class TestParseChapterFormats:
    """Tests for parse_chapter_formats."""

    def test_both_formats_in_order(self) -> None:
        formats, errors = parse_chapter_formats("simple,xml,simple")
        assert formats == [ChapterFormat.SIMPLE, ChapterFormat.XML]
        assert errors == []

    def test_unsupported_type_does_not_block_others(self) -> None:
        formats, errors = parse_chapter_formats("foo,xml")
        assert formats == [ChapterFormat.XML]
        assert len(errors) == 1
        assert errors[0].token == "foo"
        assert errors[0].category == "chapter"

    def test_none_requests_nothing(self) -> None:
        assert parse_chapter_formats("xml,none") == ([], [])
        assert parse_chapter_formats(None) == ([], [])
