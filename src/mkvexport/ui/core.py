"""Core console configuration and theme for the mkvexport UI.

This module provides the Rich console instances and theme that all other UI
modules build upon.
"""

from __future__ import annotations

from rich.console import Console
from rich.theme import Theme

from mkvexport.models import ExtractionState

# =============================================================================
# Theme Configuration
# =============================================================================

MKVEXPORT_THEME = Theme(
    {
        # Status colors
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red bold",
        # Text styles
        "step": "bold cyan",
        "title": "bold white",
        "dim": "dim",
        "highlight": "bold magenta",
        # Domain styles
        "path": "cyan",
        "codec": "magenta",
        "language": "yellow",
        "hint": "dim italic",
        # Extraction states
        "state.unmarked": "dim",
        "state.marked": "yellow",
        "state.succeeded": "green",
        "state.failed": "red bold",
    }
)

# =============================================================================
# Console Instances
# =============================================================================

# Primary console for normal output (tables, JSON)
console = Console(theme=MKVEXPORT_THEME, stderr=False)

# Error console for stderr output (progress, errors)
err_console = Console(theme=MKVEXPORT_THEME, stderr=True)


def state_markup(state: ExtractionState, label: str | None = None) -> str:
    """Rich markup for an extraction state, e.g. ``[state.failed]failed[/]``."""
    return f"[state.{state.value}]{label or state.value}[/]"
