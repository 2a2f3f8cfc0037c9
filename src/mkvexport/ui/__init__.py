"""mkvexport UI - Rich console output components.

Modules:
    core: Console instances, theme and state styles
    messages: Simple print helpers (success, error, warning, info)
    tables: Track/attachment/chapter tables and the batch summary
    progress: Two-row batch progress (files / current mkvextract call)
    errors: Exception and error formatting
    formatting: Path and size helpers
    banner: Version display

Usage:
    from mkvexport.ui import console, print_success
    from mkvexport.ui.tables import print_file_tables
    from mkvexport.ui.progress import batch_progress
"""

from __future__ import annotations

from mkvexport.ui.banner import get_version, get_version_string, print_banner
from mkvexport.ui.core import MKVEXPORT_THEME, console, err_console, state_markup
from mkvexport.ui.errors import print_error_summary, print_exception
from mkvexport.ui.formatting import format_elapsed, format_file_size, truncate_path
from mkvexport.ui.messages import (
    fatal_error,
    print_error,
    print_info,
    print_success,
    print_warning,
)

__all__ = [
    # Core
    "MKVEXPORT_THEME",
    "console",
    "err_console",
    "state_markup",
    # Banner
    "get_version",
    "get_version_string",
    "print_banner",
    # Messages
    "print_success",
    "print_error",
    "print_warning",
    "print_info",
    "fatal_error",
    # Errors
    "print_exception",
    "print_error_summary",
    # Formatting
    "format_elapsed",
    "format_file_size",
    "truncate_path",
]
