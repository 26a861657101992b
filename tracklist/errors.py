"""Errors raised by the collection pipeline."""

from typing import Optional


class TracklistError(Exception):
    """Base class for all pipeline failures."""


class UpstreamRequestFailed(TracklistError):
    """Catalog API answered with a non-success, non-429 status."""

    def __init__(self, status: Optional[int], message: str = ""):
        self.status = status
        self.message = message
        super().__init__(f"Spotify API error: {status} {message}".rstrip())


class RateLimited(TracklistError):
    """Catalog API answered 429. Never escapes the retrying stage."""

    def __init__(self, retry_after: Optional[float] = None):
        self.retry_after = retry_after
        super().__init__(f"Rate limited (retry after {retry_after}s)")


class RetriesExhausted(TracklistError):
    """A bounded retry loop ran out of attempts."""

    def __init__(self, operation: str, attempts: int):
        self.operation = operation
        self.attempts = attempts
        super().__init__(f"{operation} failed after {attempts} rate-limited attempts")


class BatchSizeExceeded(TracklistError):
    """More ids were passed to a single batch request than upstream allows."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"Batch size cannot exceed {limit} (got {size})")
