"""mkvexport CLI - command-line interface built with Typer and Rich.

Commands:
- export: extract tracks, attachments, chapters and timecodes
- info: identification tables only
"""

from __future__ import annotations

import sys

from mkvexport.cli._app import (
    EXIT_ASSET_FAILED,
    EXIT_CONFIG_ERROR,
    EXIT_ERROR,
    EXIT_INPUT_ERROR,
    EXIT_OK,
    EXIT_TOOL_NOT_FOUND,
    EXPORT_COMMANDS,
    INSPECT_COMMANDS,
    create_main_callback,
    make_app,
)
from mkvexport.cli._context import RuntimeContext, get_runtime_context

# Create main app
app = make_app()

# Register main callback (handles --version, --config, --env-file)
create_main_callback(app)


# =============================================================================
# Register Commands
# =============================================================================

from mkvexport.cli.export import register_export_commands  # noqa: E402

register_export_commands(app)


# =============================================================================
# Entry Point
# =============================================================================


def main() -> int:
    """Main entry point for the CLI."""
    try:
        app()
        return EXIT_OK
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else EXIT_OK


__all__ = [
    "app",
    "main",
    "RuntimeContext",
    "get_runtime_context",
    "EXPORT_COMMANDS",
    "INSPECT_COMMANDS",
    "EXIT_OK",
    "EXIT_ERROR",
    "EXIT_CONFIG_ERROR",
    "EXIT_TOOL_NOT_FOUND",
    "EXIT_INPUT_ERROR",
    "EXIT_ASSET_FAILED",
]

if __name__ == "__main__":
    sys.exit(main())
