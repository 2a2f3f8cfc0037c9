"""Simple message printing helpers for the mkvexport UI."""

from __future__ import annotations

from mkvexport.ui.core import console, err_console


def print_success(message: str) -> None:
    """Print a success message with checkmark.

    Example:
        >>> print_success("Extracted 3 tracks")
          ✓ Extracted 3 tracks
    """
    console.print(f"  [success]✓[/] {message}")


def print_error(message: str) -> None:
    """Print an error message with X to stderr."""
    err_console.print(f"  [error]✗[/] {message}")


def print_warning(message: str) -> None:
    """Print a warning message to stderr."""
    err_console.print(f"  [warning]![/] {message}")


def print_info(message: str) -> None:
    """Print an info message.

    Example:
        >>> print_info("Found 5 Matroska files")
          → Found 5 Matroska files
    """
    console.print(f"  [info]→[/] {message}")


def fatal_error(message: str, hint: str | None = None) -> None:
    """Print a fatal error and an optional hint.

    Example:
        >>> fatal_error("mkvextract not found", "Install MKVToolNix")
    """
    err_console.print(f"\n[error]Error:[/] {message}")
    if hint:
        err_console.print(f"[dim]Hint: {hint}[/]")
