"""Progress bar components for the mkvexport UI.

The batch progress display has two rows: an outer task spanning all input
files and an inner task that is re-scoped for every mkvextract invocation.
"""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from mkvexport.batch import BatchResult, ExportObserver, FileReport
from mkvexport.ui.core import err_console


def create_batch_progress(*, transient: bool = True) -> Progress:
    """Create a Progress instance for a batch export.

    Rendered on stderr so stdout stays clean for tables and JSON.

    Example:
        >>> with create_batch_progress() as progress:
        ...     files = progress.add_task("[cyan]Files", total=len(paths))
        ...     step = progress.add_task("[dim]tracks", total=100)
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=err_console,
        transient=transient,
    )


class RichExportObserver(ExportObserver):
    """Feeds export_files() progress events into a two-row rich Progress."""

    def __init__(self, progress: Progress) -> None:
        self.progress = progress
        self.outer: TaskID | None = None
        self.inner: TaskID | None = None

    def batch_started(self, total: int) -> None:
        self.outer = self.progress.add_task("[cyan]Files[/]", total=total)
        self.inner = self.progress.add_task("[dim]waiting[/]", total=100)

    def file_started(self, index: int, path: Path) -> None:
        if self.outer is not None:
            self.progress.update(self.outer, description=f"[cyan]{path.name}[/]")

    def step_started(self, path: Path, step: str) -> None:
        if self.inner is not None:
            self.progress.reset(self.inner, total=100, description=f"[dim]{step}[/]")

    def step_progress(self, percent: int) -> None:
        if self.inner is not None:
            self.progress.update(self.inner, completed=percent)

    def file_finished(self, report: FileReport) -> None:
        if self.outer is not None:
            self.progress.advance(self.outer)

    def batch_finished(self, result: BatchResult) -> None:
        if self.outer is not None:
            self.progress.update(self.outer, description="[cyan]Files[/]")
        if self.inner is not None:
            self.progress.update(self.inner, visible=False)


@contextmanager
def batch_progress(enabled: bool = True) -> Generator[ExportObserver, None, None]:
    """Context manager yielding an observer for export_files().

    When disabled, yields a no-op observer and draws nothing.

    Example:
        >>> with batch_progress(enabled=verbosity >= 1) as observer:
        ...     result = export_files(paths, options, observer=observer)
    """
    if not enabled:
        yield ExportObserver()
        return

    with create_batch_progress() as progress:
        yield RichExportObserver(progress)
