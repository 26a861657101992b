"""Bounded retry for rate-limited catalog requests."""

import time
from typing import Callable, TypeVar

from tracklist.constants import RATE_LIMIT_DEFAULT_DELAY_SEC, get_logger
from tracklist.errors import RateLimited, RetriesExhausted

logger = get_logger("retry")

T = TypeVar("T")


def rate_limit_backoff(attempt: int, error: RateLimited) -> float:
    """Server-advised wait, or the fixed default when the header is missing."""
    if error.retry_after is not None and error.retry_after >= 0:
        return float(error.retry_after)
    return RATE_LIMIT_DEFAULT_DELAY_SEC


def with_retry(
    op: Callable[[], T],
    max_attempts: int,
    backoff: Callable[[int, RateLimited], float] = rate_limit_backoff,
    operation: str = "request",
) -> T:
    """
    Call ``op`` until it stops raising RateLimited.

    Args:
        op: Zero-argument callable issuing the request
        max_attempts: Number of calls allowed before giving up
        backoff: Maps (attempt, error) to seconds to sleep before the next call
        operation: Name used in logs and in RetriesExhausted

    Any other exception propagates immediately.
    """
    for attempt in range(1, max_attempts + 1):
        try:
            return op()
        except RateLimited as e:
            if attempt == max_attempts:
                logger.warning(f"{operation} rate limited {max_attempts} times, giving up")
                raise RetriesExhausted(operation, max_attempts) from e

            delay = backoff(attempt, e)
            logger.warning(
                f"{operation} rate limited (attempt {attempt}/{max_attempts}). "
                f"Retrying in {delay:.1f}s..."
            )
            time.sleep(delay)

    raise RetriesExhausted(operation, max_attempts)
