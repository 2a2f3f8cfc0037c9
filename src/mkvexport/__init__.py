"""mkvexport - batch export of tracks, attachments, chapters and timecodes from Matroska files."""

from mkvexport.exceptions import (
    ConfigurationError,
    ExternalToolError,
    ExtractionError,
    IdentificationError,
    InputResolutionError,
    MkvExportError,
    SelectorError,
    ToolNotFoundError,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "MkvExportError",
    "ConfigurationError",
    "InputResolutionError",
    "SelectorError",
    "ExternalToolError",
    "ToolNotFoundError",
    "IdentificationError",
    "ExtractionError",
]
