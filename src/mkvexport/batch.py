"""
Batch orchestration.

Processes input files strictly one after another. For every file:

    identify (mkvmerge -J) -> select -> tracks -> attachments -> chapters -> timecodes

A file that cannot be identified is recorded and skipped; extraction
failures are recorded on the assets they concern. Only a missing tool or
unresolvable input paths abort the batch (raised before any file is touched).

Key functions:
    - options_from_settings(): Merge Settings with command-line overrides
    - resolve_inputs(): Expand files/directories into Matroska files
    - export_files(): Run the whole pipeline over a list of files
    - identify_files(): Identification only (``mkvexport info``)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mkvexport.config import (
    DEFAULT_ATTACHMENT_PATTERN,
    DEFAULT_CHAPTER_PATTERN,
    DEFAULT_TIMECODE_PATTERN,
    DEFAULT_TRACK_PATTERN,
    Settings,
)
from mkvexport.exceptions import IdentificationError, InputResolutionError, SelectorError
from mkvexport.extract import (
    DriverResult,
    ToolOptions,
    extract_attachments,
    extract_chapters,
    extract_timecodes,
    extract_tracks,
)
from mkvexport.identify import identify_file
from mkvexport.models import ExtractionState, FileMetadata
from mkvexport.selection import (
    parse_chapter_formats,
    select_attachments,
    select_timecodes,
    select_tracks,
)
from mkvexport.utils.tools import find_tool

logger = logging.getLogger(__name__)

MATROSKA_EXTENSIONS = frozenset({".mkv", ".mka", ".mks", ".mk3d"})


# =============================================================================
# Options
# =============================================================================


@dataclass
class ExportOptions:
    """Everything one export run needs, after settings and flags are merged."""

    tracks: list[str] = field(default_factory=list)
    attachments: list[str] = field(default_factory=list)
    chapters: list[str] = field(default_factory=list)
    timecodes: list[str] = field(default_factory=list)

    output_dir: Path | None = None
    track_pattern: str = DEFAULT_TRACK_PATTERN
    timecode_pattern: str = DEFAULT_TIMECODE_PATTERN
    attachment_pattern: str = DEFAULT_ATTACHMENT_PATTERN
    chapter_pattern: str = DEFAULT_CHAPTER_PATTERN

    parse_fully: bool = False
    raw: bool = False
    fullraw: bool = False
    verbosity: int = 2

    mkvextract: str = "mkvextract"
    mkvmerge: str = "mkvmerge"
    identify_timeout: int = 60

    def tool_options(self) -> ToolOptions:
        return ToolOptions(
            mkvextract=self.mkvextract,
            parse_fully=self.parse_fully,
            raw=self.raw,
            fullraw=self.fullraw,
            verbose=self.verbosity >= 4,
        )


def options_from_settings(settings: Settings, **overrides: Any) -> ExportOptions:
    """
    Build ExportOptions from Settings, applying non-None overrides on top.

    Example:
        >>> opts = options_from_settings(Settings(), tracks=["video"], output_dir=None)
        >>> opts.tracks, opts.track_pattern
        (['video'], '$f_$i')
    """
    values: dict[str, Any] = {
        "output_dir": settings.output_dir,
        "track_pattern": settings.track_pattern,
        "timecode_pattern": settings.timecode_pattern,
        "attachment_pattern": settings.attachment_pattern,
        "chapter_pattern": settings.chapter_pattern,
        "parse_fully": settings.parse_fully,
        "raw": settings.raw,
        "fullraw": settings.fullraw,
        "verbosity": settings.verbosity,
        "mkvextract": settings.mkvextract,
        "mkvmerge": settings.mkvmerge,
        "identify_timeout": settings.identify_timeout,
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    return ExportOptions(**values)


# =============================================================================
# Input Resolution
# =============================================================================


def is_matroska(path: Path) -> bool:
    return path.suffix.lower() in MATROSKA_EXTENSIONS


def resolve_inputs(paths: Iterable[Path | str], recursive: bool = False) -> list[Path]:
    """
    Expand input paths into an ordered, de-duplicated list of Matroska files.

    Files are taken as given; directories are scanned for .mkv/.mka/.mks/.mk3d
    (recursively if requested).

    Raises:
        InputResolutionError: If a path does not exist or nothing matched.
    """
    given = [Path(p).expanduser() for p in paths]
    missing = [p for p in given if not p.exists()]
    if missing:
        names = ", ".join(str(p) for p in missing)
        raise InputResolutionError(f"Path not found: {names}", paths=list(missing))

    files: list[Path] = []
    seen: set[Path] = set()
    for path in given:
        if path.is_dir():
            candidates = path.rglob("*") if recursive else path.iterdir()
            found = sorted(p for p in candidates if p.is_file() and is_matroska(p))
            if not found:
                logger.warning(f"No Matroska files in {path}")
        else:
            if not is_matroska(path):
                logger.warning(f"{path.name} does not have a Matroska extension")
            found = [path]

        for file in found:
            key = file.resolve()
            if key not in seen:
                seen.add(key)
                files.append(file)

    if not files:
        raise InputResolutionError("No Matroska files found", paths=list(given))
    return files


# =============================================================================
# Results
# =============================================================================


@dataclass
class FileReport:
    """Everything that happened to one input file."""

    path: Path
    metadata: FileMetadata | None = None
    results: list[DriverResult] = field(default_factory=list)
    error: IdentificationError | None = None

    @property
    def identified(self) -> bool:
        return self.metadata is not None

    def states(self) -> list[ExtractionState]:
        """States of every asset that was selected (tracks, timecodes, attachments, chapters)."""
        if self.metadata is None:
            return []
        states = [t.state for t in self.metadata.tracks]
        states += [t.timecodes_state for t in self.metadata.tracks]
        states += [a.state for a in self.metadata.attachments]
        states += [c.state for c in self.metadata.chapters]
        return [s for s in states if s != ExtractionState.UNMARKED]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = (
            self.metadata.to_dict() if self.metadata is not None else {"path": str(self.path)}
        )
        data["results"] = [r.to_dict() for r in self.results]
        if self.error is not None:
            data["error"] = self.error.message
        return data


@dataclass
class BatchResult:
    """Aggregate of a whole run."""

    files: list[FileReport] = field(default_factory=list)
    selector_errors: list[SelectorError] = field(default_factory=list)
    elapsed: float = 0.0

    def _count(self, state: ExtractionState) -> int:
        return sum(s == state for f in self.files for s in f.states())

    @property
    def succeeded(self) -> int:
        return self._count(ExtractionState.SUCCEEDED)

    @property
    def failed(self) -> int:
        return self._count(ExtractionState.FAILED)

    @property
    def skipped(self) -> int:
        """Selected assets that were never extracted (no output format)."""
        return self._count(ExtractionState.MARKED)

    @property
    def identification_errors(self) -> list[FileReport]:
        return [f for f in self.files if f.error is not None]

    @property
    def has_failures(self) -> bool:
        return self.failed > 0 or bool(self.identification_errors)

    def add_selector_errors(self, errors: Iterable[SelectorError]) -> None:
        """Record selector errors once per (category, token)."""
        known = {(e.category, e.token) for e in self.selector_errors}
        for error in errors:
            key = (error.category, error.token)
            if key not in known:
                known.add(key)
                self.selector_errors.append(error)
                logger.warning(error.message)

    def to_list(self) -> list[dict[str, Any]]:
        return [f.to_dict() for f in self.files]


# =============================================================================
# Progress Hooks
# =============================================================================


class ExportObserver:
    """Receives progress events from export_files(). All hooks are no-ops."""

    def batch_started(self, total: int) -> None:
        pass

    def file_started(self, index: int, path: Path) -> None:
        pass

    def step_started(self, path: Path, step: str) -> None:
        pass

    def step_progress(self, percent: int) -> None:
        pass

    def file_finished(self, report: FileReport) -> None:
        pass

    def batch_finished(self, result: BatchResult) -> None:
        pass


# =============================================================================
# Pipeline
# =============================================================================


def check_tools(options: ExportOptions, *, need_extract: bool = True) -> None:
    """
    Resolve the mkvmerge/mkvextract binaries in place.

    Raises:
        ToolNotFoundError: If a binary is missing.
    """
    options.mkvmerge = find_tool(options.mkvmerge)
    if need_extract:
        options.mkvextract = find_tool(options.mkvextract)


def identify_path(path: Path, options: ExportOptions) -> FileReport:
    """Identify one file; identification errors are recorded, not raised."""
    report = FileReport(path=path)
    try:
        report.metadata = identify_file(path, mkvmerge=options.mkvmerge, timeout=options.identify_timeout)
    except IdentificationError as e:
        logger.error(f"{path.name}: {e.message}")
        report.error = e
    return report


def identify_files(paths: Sequence[Path], options: ExportOptions) -> list[FileReport]:
    """Identify every file without extracting anything."""
    check_tools(options, need_extract=False)
    return [identify_path(path, options) for path in paths]


def export_file(
    report: FileReport,
    options: ExportOptions,
    result: BatchResult,
    observer: ExportObserver,
) -> None:
    """Select and extract the assets of one identified file."""
    metadata = report.metadata
    assert metadata is not None
    tool_options = options.tool_options()

    result.add_selector_errors(select_tracks(metadata.tracks, options.tracks))
    result.add_selector_errors(select_attachments(metadata.attachments, options.attachments))
    result.add_selector_errors(select_timecodes(metadata.tracks, options.timecodes))
    formats, chapter_errors = parse_chapter_formats(options.chapters)
    result.add_selector_errors(chapter_errors)

    observer.step_started(metadata.path, "tracks")
    report.results.append(
        extract_tracks(
            metadata,
            pattern=options.track_pattern,
            output_dir=options.output_dir,
            options=tool_options,
            on_progress=observer.step_progress,
        )
    )

    observer.step_started(metadata.path, "attachments")
    report.results.append(
        extract_attachments(
            metadata,
            pattern=options.attachment_pattern,
            output_dir=options.output_dir,
            options=tool_options,
            on_progress=observer.step_progress,
        )
    )

    observer.step_started(metadata.path, "chapters")
    report.results.extend(
        extract_chapters(
            metadata,
            formats,
            pattern=options.chapter_pattern,
            output_dir=options.output_dir,
            options=tool_options,
            on_progress=observer.step_progress,
        )
    )

    observer.step_started(metadata.path, "timecodes")
    report.results.append(
        extract_timecodes(
            metadata,
            pattern=options.timecode_pattern,
            output_dir=options.output_dir,
            options=tool_options,
            on_progress=observer.step_progress,
        )
    )


def export_files(
    paths: Sequence[Path],
    options: ExportOptions,
    observer: ExportObserver | None = None,
) -> BatchResult:
    """
    Run identification, selection and every extraction driver over each file.

    Args:
        paths: Resolved Matroska files (see resolve_inputs())
        options: Merged export options
        observer: Optional progress hooks (rich progress bars in the CLI)

    Returns:
        BatchResult with one FileReport per input file.

    Raises:
        ToolNotFoundError: If mkvmerge or mkvextract is missing.
    """
    observer = observer or ExportObserver()
    check_tools(options)

    result = BatchResult()
    started = time.monotonic()
    observer.batch_started(len(paths))

    for index, path in enumerate(paths, 1):
        observer.file_started(index, path)
        report = identify_path(path, options)
        result.files.append(report)
        if report.identified:
            export_file(report, options, result, observer)
        observer.file_finished(report)

    result.elapsed = time.monotonic() - started
    observer.batch_finished(result)
    logger.info(
        f"Processed {len(result.files)} file(s): {result.succeeded} succeeded, "
        f"{result.failed} failed, {result.skipped} skipped in {result.elapsed:.1f}s"
    )
    return result
