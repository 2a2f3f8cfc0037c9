"""Version display for the mkvexport CLI."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version
from typing import TYPE_CHECKING

from rich.text import Text

if TYPE_CHECKING:
    from rich.console import Console


def get_version() -> str:
    """Get the current mkvexport version.

    Tries importlib.metadata first (for installed package),
    falls back to __version__ in __init__.py.
    """
    try:
        return version("mkvexport")
    except PackageNotFoundError:
        # Fallback for development checkouts
        from mkvexport import __version__

        return __version__


def get_version_string() -> str:
    """Formatted version string like "mkvexport v0.1.0"."""
    return f"mkvexport v{get_version()}"


def make_banner_text() -> Text:
    return Text.from_markup(
        f"[bold cyan]mkvexport[/] [bold #06B6D4]v{get_version()}[/]   "
        "[dim]tracks • attachments • chapters • timecodes[/]"
    )


def print_banner(console: Console) -> None:
    """Print the one-line mkvexport banner."""
    console.print(make_banner_text())
