"""
mkvexport exception hierarchy.

Provides typed exceptions for better error handling and clearer error messages.

Exception Hierarchy:
    MkvExportError (base)
    ├── ConfigurationError - Config file issues, invalid settings
    ├── InputResolutionError - No matching input files, bad paths
    ├── SelectorError - Unsupported selector or chapter type token
    └── ExternalToolError - mkvmerge/mkvextract subprocess failures
        ├── ToolNotFoundError - Binary not found on PATH
        ├── IdentificationError - mkvmerge -J failures
        └── ExtractionError - mkvextract reported an error

Only ConfigurationError, InputResolutionError and ToolNotFoundError abort a
batch. Everything else is recorded against the file or asset it concerns.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class MkvExportError(Exception):
    """Base exception for all mkvexport errors."""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """
        Initialize mkvexport exception.

        Args:
            message: Human-readable error message
            details: Optional structured error details for logging/debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(MkvExportError):
    """Configuration file or settings error."""

    def __init__(
        self,
        message: str,
        *,
        config_file: Path | str | None = None,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if config_file:
            details["config_file"] = str(config_file)
        if field:
            details["field"] = field
        super().__init__(message, details=details)
        self.config_file = config_file
        self.field = field


# =============================================================================
# Input Errors
# =============================================================================


class InputResolutionError(MkvExportError):
    """Input paths could not be resolved to any Matroska file."""

    def __init__(
        self,
        message: str,
        *,
        paths: list[Path | str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if paths:
            details["paths"] = [str(p) for p in paths]
        super().__init__(message, details=details)
        self.paths = paths or []


class SelectorError(MkvExportError):
    """A selector or chapter type token is not understood."""

    def __init__(
        self,
        message: str,
        *,
        token: str | None = None,
        category: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if token is not None:
            details["token"] = token
        if category:
            details["category"] = category
        super().__init__(message, details=details)
        self.token = token
        self.category = category


# =============================================================================
# External Tool Errors
# =============================================================================


class ExternalToolError(MkvExportError):
    """External tool/subprocess failure."""

    def __init__(
        self,
        message: str,
        *,
        tool: str | None = None,
        command: str | None = None,
        return_code: int | None = None,
        stdout: str | None = None,
        stderr: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if tool:
            details["tool"] = tool
        if command:
            details["command"] = command
        if return_code is not None:
            details["return_code"] = return_code
        if stdout:
            details["stdout"] = stdout
        if stderr:
            details["stderr"] = stderr
        super().__init__(message, details=details)
        self.tool = tool
        self.command = command
        self.return_code = return_code
        self.stdout = stdout
        self.stderr = stderr


class ToolNotFoundError(ExternalToolError):
    """Required binary is not installed or not on PATH."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class IdentificationError(ExternalToolError):
    """mkvmerge could not identify a file."""

    def __init__(
        self,
        message: str,
        *,
        file_path: Path | str | None = None,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("tool", "mkvmerge")
        details = kwargs.get("details", {})
        if file_path:
            details["file_path"] = str(file_path)
        kwargs["details"] = details
        super().__init__(message, **kwargs)
        self.file_path = file_path


class ExtractionError(ExternalToolError):
    """mkvextract reported an error for a batch of assets."""

    def __init__(
        self,
        message: str,
        *,
        category: str | None = None,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("tool", "mkvextract")
        details = kwargs.get("details", {})
        if category:
            details["category"] = category
        kwargs["details"] = details
        super().__init__(message, **kwargs)
        self.category = category


# =============================================================================
# Convenience Aliases
# =============================================================================

ConfigError = ConfigurationError
