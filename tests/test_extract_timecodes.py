"""Tests for timecode extraction."""

from __future__ import annotations

from pathlib import Path

from mkvexport.extract import DriverOutcome, extract_timecodes
from mkvexport.models import ExtractionState, Track, TrackType
from tests.conftest import ToolScript, make_metadata, video_track

PATTERN = "$f_$i_timecodes_$v"


class TestExtractTimecodes:
    """Tests for extract_timecodes."""

    def test_marked_timecodes(self, tool_script: ToolScript, movie: Path) -> None:
        video = video_track(0)
        audio = Track(id=1, type=TrackType.AUDIO, extension="aac")
        video.set_timecodes_state(ExtractionState.MARKED)
        tool_script.add(
            [
                f"Extracting the timestamps for track 0 to the file '{movie.parent}/x.txt'.",
                "Progress: 100%",
            ]
        )

        result = extract_timecodes(make_metadata(movie, tracks=[video, audio]), pattern=PATTERN)

        assert result.outcome == DriverOutcome.COMPLETED
        assert video.timecodes_state == ExtractionState.SUCCEEDED
        assert video.timecodes_path == movie.parent / "movie_0_timecodes_v2.txt"
        assert video.state == ExtractionState.UNMARKED
        assert audio.timecodes_state == ExtractionState.UNMARKED

        argv = tool_script.calls[0]
        assert argv[2] == "timestamps_v2"
        assert argv[-1] == f"0:{video.timecodes_path}"

    def test_tracks_without_codec_format_still_get_timecodes(
        self, tool_script: ToolScript, movie: Path
    ) -> None:
        track = Track(id=4, type=TrackType.VIDEO, codec_id="V_WEIRD")
        track.set_timecodes_state(ExtractionState.MARKED)
        tool_script.add(["Progress: 100%"])

        result = extract_timecodes(make_metadata(movie, tracks=[track]), pattern=PATTERN)

        assert result.extracted == 1

    def test_error_fails_timecodes_only(self, tool_script: ToolScript, movie: Path) -> None:
        track = video_track(0)
        track.set_state(ExtractionState.MARKED)
        track.set_state(ExtractionState.SUCCEEDED)
        track.set_timecodes_state(ExtractionState.MARKED)
        tool_script.add(["Error: no timestamps"], returncode=2)

        result = extract_timecodes(make_metadata(movie, tracks=[track]), pattern=PATTERN)

        assert result.outcome == DriverOutcome.FAILED
        assert track.timecodes_state == ExtractionState.FAILED
        assert track.timecodes_path is None
        assert track.state == ExtractionState.SUCCEEDED

    def test_nothing_selected(self, tool_script: ToolScript, movie: Path) -> None:
        result = extract_timecodes(make_metadata(movie, tracks=[video_track(0)]), pattern=PATTERN)
        assert result.outcome == DriverOutcome.SKIPPED
        assert tool_script.calls == []

    def test_killed_by_signal_fails(self, tool_script: ToolScript, movie: Path) -> None:
        track = video_track(0)
        track.set_timecodes_state(ExtractionState.MARKED)
        tool_script.add([], returncode=-15)

        result = extract_timecodes(make_metadata(movie, tracks=[track]), pattern=PATTERN)

        assert result.outcome == DriverOutcome.FAILED
        assert "signal 15" in result.errors[0].message
        assert track.timecodes_state == ExtractionState.FAILED
        assert track.timecodes_path is None

    def test_output_directory_not_creatable(
        self, tool_script: ToolScript, movie: Path, tmp_path: Path
    ) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        track = video_track(0)
        track.set_timecodes_state(ExtractionState.MARKED)

        result = extract_timecodes(
            make_metadata(movie, tracks=[track]), pattern=PATTERN, output_dir=blocker / "out"
        )

        assert result.outcome == DriverOutcome.FAILED
        assert track.timecodes_state == ExtractionState.FAILED
        assert track.timecodes_path is None
        assert tool_script.calls == []
