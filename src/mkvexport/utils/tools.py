"""External tool discovery and line-streamed subprocess execution.

mkvextract reports progress as ``Progress: NN%`` terminated by a carriage
return. Reading in text mode with universal newlines turns every update into
its own line, so callers can classify the stream one line at a time.
"""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from collections import deque
from collections.abc import Iterator
from pathlib import Path

from mkvexport.exceptions import ToolNotFoundError

logger = logging.getLogger(__name__)

# Number of trailing output lines kept per invocation for diagnostics
OUTPUT_TAIL_SIZE = 20


def find_tool(name: str) -> str:
    """
    Locate an executable by explicit path or on PATH.

    Args:
        name: Binary name ("mkvextract") or path to it.

    Returns:
        Absolute path of the executable.

    Raises:
        ToolNotFoundError: If the binary cannot be found.
    """
    candidate = Path(name).expanduser()
    if candidate.parent != Path(".") and candidate.is_file():
        return str(candidate.resolve())

    found = shutil.which(name)
    if found:
        return found

    raise ToolNotFoundError(
        f"'{name}' not found in PATH. Install MKVToolNix or configure the binary path.",
        tool=Path(name).name,
    )


class LineStream:
    """Run a command and iterate over its combined stdout/stderr, line by line.

    The stream is lazy and single-use: the subprocess starts on the first
    iteration and is waited for once output is exhausted. The last
    ``tail_size`` lines are kept in ``tail`` and the exit status in
    ``return_code``.

    Example:
        >>> stream = LineStream(["mkvextract", "in.mkv", "tracks", "0:out.h264"])
        >>> for line in stream:
        ...     handle(line)
        >>> stream.return_code
        0
    """

    def __init__(self, argv: list[str], *, tail_size: int = OUTPUT_TAIL_SIZE) -> None:
        self.argv = list(argv)
        self.tail: deque[str] = deque(maxlen=tail_size)
        self.return_code: int | None = None
        self._started = False

    @property
    def command(self) -> str:
        return shlex.join(self.argv)

    def __iter__(self) -> Iterator[str]:
        if self._started:
            raise RuntimeError("LineStream can only be iterated once")
        self._started = True
        return self._run()

    def _run(self) -> Iterator[str]:
        logger.debug(f"Running: {self.command}")
        try:
            proc = subprocess.Popen(
                self.argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as e:
            raise ToolNotFoundError(
                f"Could not start {self.argv[0]}: {e}",
                tool=Path(self.argv[0]).name,
                command=self.command,
            ) from e

        with proc:
            assert proc.stdout is not None
            for raw in proc.stdout:
                line = raw.rstrip("\r\n")
                if not line.strip():
                    continue
                self.tail.append(line)
                yield line
            self.return_code = proc.wait()

        logger.debug(f"{Path(self.argv[0]).name} exited with code {self.return_code}")

    def tail_text(self) -> str:
        return "\n".join(self.tail)
