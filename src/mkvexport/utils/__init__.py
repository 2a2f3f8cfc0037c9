"""Utility modules for mkvexport."""

from mkvexport.utils.retry import SUBPROCESS_EXCEPTIONS, RetryableError, retry_with_backoff
from mkvexport.utils.tools import LineStream, find_tool

__all__ = [
    "LineStream",
    "RetryableError",
    "SUBPROCESS_EXCEPTIONS",
    "find_tool",
    "retry_with_backoff",
]
