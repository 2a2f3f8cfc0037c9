"""Tests for tool discovery and LineStream."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from mkvexport.exceptions import ToolNotFoundError
from mkvexport.utils.tools import LineStream, find_tool
from tests.conftest import ToolScript


class TestFindTool:
    """Tests for find_tool."""

    def test_found_on_path(self) -> None:
        with patch("mkvexport.utils.tools.shutil.which", return_value="/usr/bin/mkvextract"):
            assert find_tool("mkvextract") == "/usr/bin/mkvextract"

    def test_explicit_path(self, tmp_path: Path) -> None:
        binary = tmp_path / "bin" / "mkvextract"
        binary.parent.mkdir()
        binary.write_text("#!/bin/sh\n")
        assert find_tool(str(binary)) == str(binary.resolve())

    def test_missing(self) -> None:
        with (
            patch("mkvexport.utils.tools.shutil.which", return_value=None),
            pytest.raises(ToolNotFoundError, match="not found in PATH") as exc_info,
        ):
            find_tool("mkvextract")
        assert exc_info.value.tool == "mkvextract"


class TestLineStream:
    """Tests for LineStream."""

    def test_lines_and_return_code(self, tool_script: ToolScript) -> None:
        tool_script.add(["Progress: 0%", "", "Progress: 100%"], returncode=1)
        stream = LineStream(["mkvextract", "in.mkv"])

        assert list(stream) == ["Progress: 0%", "Progress: 100%"]
        assert stream.return_code == 1
        assert tool_script.calls == [["mkvextract", "in.mkv"]]

    def test_return_code_unset_before_exhaustion(self, tool_script: ToolScript) -> None:
        tool_script.add(["a", "b"])
        stream = LineStream(["tool"])
        iterator = iter(stream)
        assert next(iterator) == "a"
        assert stream.return_code is None

    def test_tail_is_bounded(self, tool_script: ToolScript) -> None:
        tool_script.add([f"line {i}" for i in range(10)])
        stream = LineStream(["tool"], tail_size=3)
        list(stream)
        assert list(stream.tail) == ["line 7", "line 8", "line 9"]
        assert stream.tail_text() == "line 7\nline 8\nline 9"

    def test_single_use(self, tool_script: ToolScript) -> None:
        tool_script.add([])
        stream = LineStream(["tool"])
        list(stream)
        with pytest.raises(RuntimeError):
            iter(stream)

    def test_command_is_shell_quoted(self) -> None:
        stream = LineStream(["mkvextract", "my movie.mkv"])
        assert stream.command == "mkvextract 'my movie.mkv'"

    def test_binary_missing(self) -> None:
        with (
            patch("mkvexport.utils.tools.subprocess.Popen", side_effect=FileNotFoundError("x")),
            pytest.raises(ToolNotFoundError, match="Could not start"),
        ):
            list(LineStream(["/nowhere/mkvextract"]))
