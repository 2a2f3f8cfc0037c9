"""Retry logic using tenacity library.

Provides exponential backoff with jitter for subprocess calls that can fail
transiently (slow network shares, resource exhaustion).
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable
from typing import TypeVar

from tenacity import (
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)
from tenacity import (
    retry as _retry,
)

T = TypeVar("T")

logger = logging.getLogger(__name__)


def retry_with_backoff(
    *,
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    jitter: float = 1.0,
    exceptions: tuple[type[BaseException], ...] = (Exception,),
    logger_instance: logging.Logger | None = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Retry decorator with exponential backoff and jitter.

    Args:
        max_retries: Number of retries AFTER the first attempt (total = max_retries + 1)
        base_delay: Initial delay in seconds
        max_delay: Maximum delay in seconds
        jitter: Random jitter in seconds
        exceptions: Tuple of exception types to retry on
        logger_instance: Logger for retry warnings (uses module logger if None)

    Returns:
        Decorator function

    Example:
        @retry_with_backoff(max_retries=2, exceptions=SUBPROCESS_EXCEPTIONS)
        def identify():
            return subprocess.run(cmd, check=True, timeout=60)
    """
    log = logger_instance or logger

    return _retry(
        reraise=True,
        stop=stop_after_attempt(max(max_retries, 0) + 1),
        wait=wait_exponential_jitter(initial=base_delay, max=max_delay, jitter=jitter),
        retry=retry_if_exception_type(exceptions),
        before_sleep=before_sleep_log(log, logging.WARNING),
    )


class RetryableError(Exception):
    """Exception that explicitly indicates the operation should be retried."""

    def __init__(self, message: str, original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original


# Missing binaries (FileNotFoundError) are not retried.
SUBPROCESS_EXCEPTIONS: tuple[type[Exception], ...] = (
    subprocess.TimeoutExpired,
    BlockingIOError,
    InterruptedError,
    RetryableError,
)
