"""Logging configuration for mkvexport."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from rich.logging import RichHandler

from mkvexport.ui.core import err_console

# Global reference to console handler for level adjustment
_console_handler: logging.Handler | None = None

# Console log level per verbosity setting (0-4)
VERBOSITY_LEVELS: dict[int, int] = {
    0: logging.ERROR,
    1: logging.WARNING,
    2: logging.WARNING,
    3: logging.INFO,
    4: logging.DEBUG,
}


def level_for_verbosity(verbosity: int) -> int:
    """Map a 0-4 verbosity setting onto a console logging level."""
    verbosity = max(0, min(verbosity, max(VERBOSITY_LEVELS)))
    return VERBOSITY_LEVELS[verbosity]


def setup_logging(
    log_level: str = "INFO",
    log_file: Path | str | None = None,
    rich_console: bool = True,
    verbosity: int | None = None,
) -> logging.Logger:
    """
    Configure logging for mkvexport.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file path for log output
        rich_console: Use rich handler for pretty console output
        verbosity: If given, console level follows the 0-4 verbosity scale
            instead of log_level

    Returns:
        Package logger instance
    """
    global _console_handler
    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger("mkvexport")
    logger.setLevel(logging.DEBUG if log_file else level)
    logger.handlers.clear()

    file_format = logging.Formatter(
        "%(asctime)s | %(levelname)-5s | [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler: logging.Handler
    console_level = level_for_verbosity(verbosity) if verbosity is not None else level
    if verbosity is not None and not log_file:
        logger.setLevel(min(level, console_level))
    if rich_console:
        # Shared with the progress display so log lines render above it
        console_handler = RichHandler(
            console=err_console,
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
            markup=False,
        )
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    console_handler.setLevel(console_level)

    logger.addHandler(console_handler)
    _console_handler = console_handler

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)  # Always log DEBUG to file
        file_handler.setFormatter(file_format)
        logger.addHandler(file_handler)

    return logger


def set_console_verbosity(verbosity: int) -> None:
    """
    Re-scope the console handler to a new verbosity.

    File logging is unaffected.

    Args:
        verbosity: 0 (errors only) through 4 (full tool output)
    """
    global _console_handler
    if _console_handler is not None:
        _console_handler.setLevel(level_for_verbosity(verbosity))
