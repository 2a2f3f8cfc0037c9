"""Shared pieces of the mkvextract drivers.

Every driver builds one mkvextract command, consumes its combined output as a
LineStream and classifies each line:

    Progress: 45%                 -> progress callback
    Error: <message>              -> still-MARKED assets become FAILED
    Warning: <message>            -> logged, no state change
    Extracting track 0 with ...   -> identity report (INFO)
    anything else                 -> tool chatter (INFO)

Tracks and timecodes complete as one batch: the decision is taken once the
stream is exhausted (see finish_batch()).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Generic, TypeVar

from mkvexport.exceptions import ExtractionError
from mkvexport.models import ExtractionState
from mkvexport.utils.tools import OUTPUT_TAIL_SIZE, LineStream

logger = logging.getLogger(__name__)

# =============================================================================
# Output Grammar
# =============================================================================

PROGRESS_RE = re.compile(r"^(?:Progress: |#GUI#progress )(\d+)%")
ERROR_RE = re.compile(r"^Error: (.*)")
WARNING_RE = re.compile(r"^Warning: (.*)")
TRACK_IDENTITY_RE = re.compile(
    r"^Extracting track (\d+) with the CodecID '([^']*)' to the file '(.*)'\. "
    r"Container format: (.*)$"
)
TIMECODE_IDENTITY_RE = re.compile(
    r"^Extracting the time(?:stamps|codes) for track (\d+) to the file '(.*)'\."
)
ATTACHMENT_WRITTEN_RE = re.compile(
    r"^The attachment #(\d+), ID (\d+), MIME type (.*?), size (\d+), is written to '(.*)'\."
)

# mkvextract: 0 = ok, 1 = ok with warnings, 2 = error; negative = killed by a signal
TOOL_FAILURE_EXIT = 2

ProgressCallback = Callable[[int], None]


class DriverOutcome(str, Enum):
    """How one driver invocation ended."""

    SKIPPED = "skipped"  # nothing selected
    EMPTY = "empty"  # the file has nothing of this category
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class DriverResult:
    """Result of one driver call for one file."""

    category: str
    outcome: DriverOutcome
    extracted: int = 0
    failed: int = 0
    errors: list[ExtractionError] = field(default_factory=list)
    output_tail: list[str] = field(default_factory=list)
    return_code: int | None = None
    command: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome != DriverOutcome.FAILED

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "outcome": self.outcome.value,
            "extracted": self.extracted,
            "failed": self.failed,
            "errors": [e.message for e in self.errors],
            "return_code": self.return_code,
        }


@dataclass
class ToolOptions:
    """mkvextract invocation flags shared by all drivers."""

    mkvextract: str = "mkvextract"
    parse_fully: bool = False
    raw: bool = False
    fullraw: bool = False
    verbose: bool = False
    tail_size: int = OUTPUT_TAIL_SIZE


def build_command(
    options: ToolOptions,
    source: Path,
    mode: str,
    specs: Sequence[str],
    *,
    mode_flags: Sequence[str] = (),
) -> list[str]:
    """
    Assemble an mkvextract command line.

    Example:
        >>> build_command(ToolOptions(), Path("a.mkv"), "tracks", ["0:a_0.h264"])
        ['mkvextract', 'a.mkv', 'tracks', '--ui-language', 'en', '0:a_0.h264']
    """
    cmd = [options.mkvextract, str(source), mode, "--ui-language", "en"]
    if options.parse_fully:
        cmd.append("--parse-fully")
    if options.verbose:
        cmd.append("-v")
    cmd.extend(mode_flags)
    cmd.extend(specs)
    return cmd


def ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def tool_failed(return_code: int | None) -> bool:
    """True for an mkvextract error exit or a kill by signal."""
    if return_code is None:
        return False
    return return_code < 0 or return_code >= TOOL_FAILURE_EXIT


def exit_message(return_code: int) -> str:
    if return_code < 0:
        return f"mkvextract was terminated by signal {-return_code}"
    return f"mkvextract exited with code {return_code}"


def classify_common(
    line: str,
    category: str,
    log: logging.Logger,
    on_progress: ProgressCallback | None,
) -> tuple[str, Any]:
    """
    Classify a line shared by every mode.

    Returns:
        ("progress", percent), ("error", message), ("warning", message)
        or ("other", line).
    """
    log.debug(line)

    m = PROGRESS_RE.match(line)
    if m:
        percent = int(m.group(1))
        if on_progress is not None:
            on_progress(percent)
        return "progress", percent

    m = ERROR_RE.match(line)
    if m:
        message = m.group(1).strip()
        log.error(f"mkvextract {category}: {message}")
        return "error", message

    m = WARNING_RE.match(line)
    if m:
        message = m.group(1).strip()
        log.warning(f"mkvextract {category}: {message}")
        return "warning", message

    return "other", line


# =============================================================================
# All-or-nothing batches (tracks, timecodes)
# =============================================================================

T = TypeVar("T")


@dataclass
class StateAccess(Generic[T]):
    """Which state/path pair of an asset a batch drives."""

    get_state: Callable[[T], ExtractionState]
    set_state: Callable[[T, ExtractionState], ExtractionState]
    clear_path: Callable[[T], None]


def fail_marked(assets: Sequence[T], access: StateAccess[T]) -> int:
    """Move every still-MARKED asset to FAILED and drop its output path."""
    count = 0
    for asset in assets:
        if access.get_state(asset) == ExtractionState.MARKED:
            access.set_state(asset, ExtractionState.FAILED)
            access.clear_path(asset)
            count += 1
    return count


def abort_batch(
    assets: Sequence[T],
    access: StateAccess[T],
    error: OSError,
    *,
    category: str,
    log: logging.Logger,
) -> DriverResult:
    """Fail a batch whose output paths could not be prepared; mkvextract never ran."""
    log.error(f"mkvextract {category}: could not prepare output: {error}")
    failed = fail_marked(assets, access)
    return DriverResult(
        category=category,
        outcome=DriverOutcome.FAILED,
        failed=failed,
        errors=[ExtractionError(f"Could not prepare output: {error}", category=category)],
    )


def run_batch(
    stream: LineStream,
    assets: Sequence[T],
    access: StateAccess[T],
    *,
    category: str,
    identity_re: re.Pattern[str],
    log: logging.Logger,
    on_progress: ProgressCallback | None = None,
) -> DriverResult:
    """
    Drive one all-or-nothing mkvextract invocation to completion.

    An ``Error:`` line fails every still-MARKED asset immediately. When the
    stream ends, still-MARKED assets succeed if the last progress line was
    100% (or no progress was printed and the tool exited cleanly), otherwise
    they fail.
    """
    errors: list[ExtractionError] = []
    last_percent: int | None = None

    try:
        for line in stream:
            kind, value = classify_common(line, category, log, on_progress)
            if kind == "progress":
                last_percent = value
            elif kind == "error":
                errors.append(ExtractionError(value, category=category, command=stream.command))
                fail_marked(assets, access)
            elif kind == "other":
                m = identity_re.match(line)
                if m:
                    log.info(f"Extracting {category} for track {m.group(1)}")
                else:
                    log.info(line)
    except OSError as e:
        log.error(f"mkvextract {category}: could not run mkvextract: {e}")
        errors.append(
            ExtractionError(
                f"Could not run mkvextract: {e}", category=category, command=stream.command
            )
        )

    finish_batch(stream, assets, access, category=category, errors=errors, last_percent=last_percent)

    succeeded = sum(1 for a in assets if access.get_state(a) == ExtractionState.SUCCEEDED)
    failed = sum(1 for a in assets if access.get_state(a) == ExtractionState.FAILED)
    result = DriverResult(
        category=category,
        outcome=DriverOutcome.FAILED if failed else DriverOutcome.COMPLETED,
        extracted=succeeded,
        failed=failed,
        errors=errors,
        output_tail=list(stream.tail),
        return_code=stream.return_code,
        command=stream.command,
    )
    if failed:
        log.debug(f"mkvextract {category} output tail:\n{stream.tail_text()}")
    return result


def finish_batch(
    stream: LineStream,
    assets: Sequence[T],
    access: StateAccess[T],
    *,
    category: str,
    errors: list[ExtractionError],
    last_percent: int | None,
) -> None:
    """Settle still-MARKED assets once the tool has exited."""
    pending = [a for a in assets if access.get_state(a) == ExtractionState.MARKED]
    if not pending:
        return

    if errors:
        fail_marked(pending, access)
        return

    if stream.return_code is not None and tool_failed(stream.return_code):
        message = exit_message(stream.return_code)
    elif last_percent is None or last_percent == 100:
        for asset in pending:
            access.set_state(asset, ExtractionState.SUCCEEDED)
        return
    else:
        message = f"mkvextract stopped at {last_percent}%"

    errors.append(
        ExtractionError(
            message,
            category=category,
            command=stream.command,
            return_code=stream.return_code,
            stdout=stream.tail_text(),
        )
    )
    fail_marked(pending, access)
