"""Runtime context for CLI commands.

A typed runtime context is initialized once in the main callback and is
available to all commands via ctx.obj.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from mkvexport.config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass
class RuntimeContext:
    """Typed runtime context available to all commands via ctx.obj.

    Example:
        @app.command()
        def my_command(ctx: typer.Context) -> None:
            runtime = get_runtime_context(ctx.obj)
            print(runtime.settings.output_dir)
    """

    config_path: Path | None = None
    env_file: Path | None = None
    settings: Settings | None = None

    def require_settings(self) -> Settings:
        """Loaded settings, falling back to defaults plus environment."""
        if self.settings is None:
            logger.debug("No settings in runtime context, loading defaults")
            self.settings = get_settings()
        return self.settings


def get_runtime_context(ctx_obj: object) -> RuntimeContext:
    """Extract RuntimeContext from typer context object.

    Raises:
        TypeError: If ctx_obj is neither a RuntimeContext nor None
    """
    if isinstance(ctx_obj, RuntimeContext):
        return ctx_obj
    if ctx_obj is None:
        return RuntimeContext()

    raise TypeError(
        f"Expected RuntimeContext, got {type(ctx_obj).__name__}. "
        "Ensure the main callback initializes ctx.obj properly."
    )
