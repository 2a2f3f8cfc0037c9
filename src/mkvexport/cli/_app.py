"""App configuration, callbacks, and shared types for the CLI.

This module contains the Typer application factory, the main callback and
the exit codes used by every command.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

from mkvexport.cli._context import RuntimeContext
from mkvexport.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# =============================================================================
# Help Panel Names
# =============================================================================

EXPORT_COMMANDS = "Export"
INSPECT_COMMANDS = "Inspect"

# =============================================================================
# Exit Codes
# =============================================================================

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_TOOL_NOT_FOUND = 3
EXIT_INPUT_ERROR = 4
EXIT_ASSET_FAILED = 5


# =============================================================================
# Version Callback
# =============================================================================


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from mkvexport.ui import console, print_banner

        print_banner(console)
        raise typer.Exit()


# =============================================================================
# App Factory
# =============================================================================


# Epilog shown at bottom of main --help
MAIN_EPILOG = """
[bold cyan]Examples:[/]
  mkvexport export movie.mkv -t all                  [dim]# Every track[/]
  mkvexport export Shows/ -r -a fonts -c xml        [dim]# Fonts + XML chapters[/]
  mkvexport export movie.mkv -t video -T video      [dim]# Video + its timecodes[/]
  mkvexport info movie.mkv                          [dim]# Tracks, no extraction[/]

[bold cyan]Tips:[/]
  - Selectors are comma-separated: [green]-t video,2,3[/]
  - Global flags like [green]--config[/] go [bold]BEFORE[/] the command
"""


def make_app() -> typer.Typer:
    """Create and configure the main Typer application."""
    return typer.Typer(
        name="mkvexport",
        help="Batch-export tracks, attachments, chapters and timecodes from Matroska files",
        epilog=MAIN_EPILOG,
        rich_markup_mode="rich",
        pretty_exceptions_enable=True,
        pretty_exceptions_show_locals=False,
        no_args_is_help=True,
        add_completion=False,
        context_settings={"help_option_names": ["-h", "--help"]},
    )


# =============================================================================
# Main Callback Factory
# =============================================================================


def create_main_callback(app: typer.Typer) -> None:
    """Register the main callback on the app."""

    @app.callback(invoke_without_command=True)
    def main_callback(
        ctx: typer.Context,
        version: Annotated[
            bool,
            typer.Option(
                "--version",
                "-V",
                callback=version_callback,
                is_eager=True,
                help="Show version and exit.",
            ),
        ] = False,
        config: Annotated[
            Path | None,
            typer.Option(
                "--config",
                help="Path to a YAML config file.",
                envvar="MKVEXPORT_CONFIG",
            ),
        ] = None,
        env_file: Annotated[
            Path | None,
            typer.Option(
                "--env-file",
                help="Load MKVEXPORT_* variables from this .env file.",
            ),
        ] = None,
    ) -> None:
        """Batch-export Matroska tracks, attachments, chapters and timecodes.

        Drives [cyan]mkvmerge[/] (identification) and [cyan]mkvextract[/]
        (extraction) from MKVToolNix, which must be installed.
        """
        from mkvexport.config import reload_settings
        from mkvexport.ui import fatal_error

        try:
            settings = reload_settings(config_file=config, env_file=env_file)
        except ConfigurationError as e:
            fatal_error(e.message, "Check the config file and MKVEXPORT_* environment variables")
            raise typer.Exit(EXIT_CONFIG_ERROR) from e

        ctx.obj = RuntimeContext(config_path=config, env_file=env_file, settings=settings)
