"""Tests for configuration loading."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from mkvexport.config import (
    DEFAULT_ATTACHMENT_PATTERN,
    DEFAULT_TRACK_PATTERN,
    Settings,
    clear_settings,
    get_settings,
    load_settings,
    load_yaml_config,
    reload_settings,
)
from mkvexport.exceptions import ConfigurationError


class TestSettings:
    """Tests for Settings defaults and validation."""

    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.mkvextract == "mkvextract"
        assert settings.mkvmerge == "mkvmerge"
        assert settings.output_dir is None
        assert settings.track_pattern == DEFAULT_TRACK_PATTERN
        assert settings.attachment_pattern == DEFAULT_ATTACHMENT_PATTERN
        assert settings.verbosity == 2
        assert not settings.raw and not settings.fullraw

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MKVEXPORT_TRACK_PATTERN", "$f-$t-$i")
        monkeypatch.setenv("MKVEXPORT_VERBOSITY", "4")
        settings = Settings()
        assert settings.track_pattern == "$f-$t-$i"
        assert settings.verbosity == 4

    def test_log_level_normalized(self) -> None:
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValueError, match="log_level"):
            Settings(log_level="LOUD")

    def test_empty_pattern_rejected(self) -> None:
        with pytest.raises(ValueError, match="must not be empty"):
            Settings(chapter_pattern="  ")

    def test_raw_and_fullraw_exclusive(self) -> None:
        with pytest.raises(ValueError, match="mutually exclusive"):
            Settings(raw=True, fullraw=True)

    def test_verbosity_range(self) -> None:
        with pytest.raises(ValueError):
            Settings(verbosity=5)


class TestLoadYamlConfig:
    """Tests for load_yaml_config."""

    def test_load_valid_yaml(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("track_pattern: '$f.$l.$i'\nparse_fully: true\n")
        assert load_yaml_config(config) == {"track_pattern": "$f.$l.$i", "parse_fully": True}

    def test_load_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            load_yaml_config(tmp_path / "missing.yaml")

    def test_load_empty_yaml(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("")
        assert load_yaml_config(config) == {}

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("track_pattern: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_yaml_config(config)

    def test_non_mapping(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_yaml_config(config)


class TestLoadSettings:
    """Tests for load_settings source precedence."""

    def test_yaml_values(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text(f"output_dir: {tmp_path / 'out'}\nverbosity: 3\n")

        settings = load_settings(config_file=config)

        assert settings.output_dir == tmp_path / "out"
        assert settings.verbosity == 3

    def test_env_wins_over_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("mkvextract: /opt/yaml/mkvextract\n")
        monkeypatch.setenv("MKVEXPORT_MKVEXTRACT", "/opt/env/mkvextract")

        settings = load_settings(config_file=config)

        assert settings.mkvextract == "/opt/env/mkvextract"

    def test_env_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Values from --env-file land in the environment and win over defaults."""
        # Registered with monkeypatch so the value is removed after the test
        monkeypatch.setenv("MKVEXPORT_CHAPTER_PATTERN", "placeholder")
        env_file = tmp_path / ".env"
        env_file.write_text("MKVEXPORT_CHAPTER_PATTERN='$n'\n")

        settings = load_settings(env_file=env_file)

        assert settings.chapter_pattern == "$n"
        assert os.environ["MKVEXPORT_CHAPTER_PATTERN"] == "$n"

    def test_missing_env_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Env file not found"):
            load_settings(env_file=tmp_path / "missing.env")

    def test_invalid_value_reports_field(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("verbosity: 11\n")

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(config_file=config)

        assert exc_info.value.field == "verbosity"
        assert exc_info.value.config_file == config


class TestCachedSettings:
    """Tests for get_settings / reload_settings / clear_settings."""

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_reload_replaces_cache(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("parse_fully: true\n")
        first = get_settings()

        reloaded = reload_settings(config_file=config)

        assert reloaded is not first
        assert get_settings() is reloaded
        assert reloaded.parse_fully

    def test_clear(self) -> None:
        first = get_settings()
        clear_settings()
        assert get_settings() is not first
