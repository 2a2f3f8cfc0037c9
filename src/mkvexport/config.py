"""Settings for mkvexport using pydantic-settings.

Settings are read from (highest priority first):
    1. Environment variables with the ``MKVEXPORT_`` prefix
       (optionally loaded from a ``.env`` file)
    2. A YAML config file passed with ``--config``
    3. Built-in defaults

Command-line flags are applied on top by the CLI when it builds the
per-run ``ExportOptions``.

Usage:
    from mkvexport.config import get_settings

    settings = get_settings()
    print(settings.track_pattern)  # "$f_$i" unless overridden

Environment Variables:
    MKVEXPORT_MKVEXTRACT - mkvextract binary name or path (default: "mkvextract")
    MKVEXPORT_MKVMERGE - mkvmerge binary name or path (default: "mkvmerge")
    MKVEXPORT_OUTPUT_DIR - Output directory (default: next to each input file)
    MKVEXPORT_TRACK_PATTERN, MKVEXPORT_TIMECODE_PATTERN,
    MKVEXPORT_ATTACHMENT_PATTERN, MKVEXPORT_CHAPTER_PATTERN - Naming patterns
    MKVEXPORT_VERBOSITY - 0 (silent) to 4 (full tool output), default 2
    MKVEXPORT_LOG_LEVEL - Log level for the log file (default: "INFO")
    MKVEXPORT_LOG_FILE - Optional log file path
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from mkvexport.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_TRACK_PATTERN = "$f_$i"
DEFAULT_TIMECODE_PATTERN = "$f_$i_timecodes_$v"
DEFAULT_ATTACHMENT_PATTERN = "$f_Attachments/$n"
DEFAULT_CHAPTER_PATTERN = "$f_chapters"


class Settings(BaseSettings):
    """Resolved mkvexport configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MKVEXPORT_",
        extra="ignore",
    )

    # Tools
    mkvextract: str = Field(default="mkvextract", description="mkvextract binary")
    mkvmerge: str = Field(default="mkvmerge", description="mkvmerge binary")
    identify_timeout: int = Field(default=60, gt=0, description="mkvmerge -J timeout (seconds)")

    # Output
    output_dir: Path | None = Field(default=None, description="Output directory")
    track_pattern: str = DEFAULT_TRACK_PATTERN
    timecode_pattern: str = DEFAULT_TIMECODE_PATTERN
    attachment_pattern: str = DEFAULT_ATTACHMENT_PATTERN
    chapter_pattern: str = DEFAULT_CHAPTER_PATTERN

    # mkvextract flags
    parse_fully: bool = False
    raw: bool = False
    fullraw: bool = False

    # Reporting
    verbosity: int = Field(default=2, ge=0, le=4)
    log_level: str = "INFO"
    log_file: Path | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML values arrive as init kwargs; environment wins over them.
        return (env_settings, dotenv_settings, init_settings, file_secret_settings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"log_level must be one of {sorted(valid_levels)}, got: {v}")
        return upper

    @field_validator(
        "track_pattern", "timecode_pattern", "attachment_pattern", "chapter_pattern"
    )
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("naming patterns must not be empty")
        return v

    @model_validator(mode="after")
    def check_raw_modes(self) -> Settings:
        if self.raw and self.fullraw:
            raise ValueError("raw and fullraw are mutually exclusive")
        return self


def load_yaml_config(config_file: Path | str) -> dict[str, Any]:
    """
    Load a YAML config file into a dict.

    Raises:
        ConfigurationError: If the file is missing or not a YAML mapping.
    """
    path = Path(config_file)
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}", config_file=path)

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}", config_file=path) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file must contain a mapping, got {type(data).__name__}",
            config_file=path,
        )
    return data


def load_settings(
    config_file: Path | str | None = None,
    env_file: Path | str | None = None,
) -> Settings:
    """
    Build Settings from defaults, an optional YAML file and the environment.

    Args:
        config_file: Optional YAML config file.
        env_file: Optional .env file, loaded into the environment first.

    Raises:
        ConfigurationError: If any source holds invalid values.
    """
    if env_file is not None:
        from dotenv import load_dotenv

        if not Path(env_file).exists():
            raise ConfigurationError(f"Env file not found: {env_file}", config_file=env_file)
        load_dotenv(env_file, override=True)

    yaml_data = load_yaml_config(config_file) if config_file is not None else {}

    try:
        settings = Settings(**yaml_data)
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        field = ".".join(str(p) for p in first.get("loc", ())) or None
        raise ConfigurationError(
            f"Invalid configuration: {first.get('msg', e)}",
            config_file=config_file,
            field=field,
        ) from e

    logger.debug(f"Loaded settings (config_file={config_file})")
    return settings


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings, building them from defaults and the environment on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reload_settings(
    config_file: Path | str | None = None,
    env_file: Path | str | None = None,
) -> Settings:
    """Rebuild settings from the given sources and cache the result."""
    global _settings
    _settings = load_settings(config_file=config_file, env_file=env_file)
    return _settings


def clear_settings() -> None:
    """Clear the cached settings (useful for testing)."""
    global _settings
    _settings = None
