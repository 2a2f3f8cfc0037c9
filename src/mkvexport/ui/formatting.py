"""Formatting helpers for the mkvexport UI."""

from __future__ import annotations

from pathlib import Path


def truncate_path(path: str | Path | None, max_length: int = 50) -> str:
    """Truncate a path for display, keeping the end visible.

    Example:
        >>> truncate_path("/very/long/path/to/Movie (2024)_Attachments/Arial.ttf", max_length=30)
        '… (2024)_Attachments/Arial.ttf'
    """
    if path is None:
        return "-"
    text = str(path)
    if len(text) <= max_length:
        return text
    return "…" + text[-(max_length - 1) :]


def format_file_size(size_bytes: int | None) -> str:
    """Format file size in human-readable form ("1.5 MB")."""
    if size_bytes is None:
        return "?"

    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if abs(size) < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024

    return f"{size:.1f} PB"


def format_elapsed(seconds: float) -> str:
    """Format elapsed seconds: "42.1s" or "3m 05s"."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m {secs:02d}s"
