"""Error reporting for the mkvexport UI."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from rich.table import Table
from rich.traceback import Traceback

from mkvexport.exceptions import ExtractionError, MkvExportError
from mkvexport.ui.core import err_console
from mkvexport.ui.formatting import truncate_path

# Keys of MkvExportError.details worth showing to a user; stdout/stderr tails go to the log
SHOWN_DETAILS = ("tool", "command", "return_code", "file_path", "config_file", "field")


def print_exception(error: Exception, title: str = "Error", show_traceback: bool = True) -> None:
    """Print an exception, its mkvexport details and optionally a traceback.

    Example:
        >>> try:
        ...     export_files(paths, options)
        ... except Exception as e:
        ...     print_exception(e, "Unexpected error")
    """
    err_console.print(f"\n[error]❌ {title}[/]")
    err_console.print(f"[error]{type(error).__name__}:[/] {error}")

    if isinstance(error, MkvExportError):
        shown = [(k, error.details[k]) for k in SHOWN_DETAILS if k in error.details]
        if shown:
            err_console.print()
            for key, value in shown:
                err_console.print(f"  [dim]{key}:[/] {value}")

    if show_traceback:
        err_console.print()
        err_console.print(
            Traceback.from_exception(type(error), error, error.__traceback__, max_frames=10)
        )


def print_error_summary(
    errors: Sequence[tuple[Path, Exception]], title: str = "Errors"
) -> None:
    """Print one row per (input file, error); ExtractionErrors also name their step."""
    if not errors:
        return

    table = Table(title=f"[error]{title}[/]", show_header=True, header_style="bold")
    table.add_column("File", style="path")
    table.add_column("Step", style="yellow")
    table.add_column("Message", style="red", overflow="fold")

    for path, error in errors:
        step = error.category if isinstance(error, ExtractionError) else "identify"
        table.add_row(truncate_path(path.name, max_length=40), step or "-", str(error))

    err_console.print(table)
