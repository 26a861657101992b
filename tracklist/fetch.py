"""Cursor pagination and batched id lookups with rate-limit handling."""

import time
from typing import Callable, Iterable, Optional, Sequence, TypeVar

from tracklist.constants import (
    HYDRATE_MAX_RETRIES,
    HYDRATE_REQUEST_DELAY_SEC,
    PAGE_MAX_RETRIES,
    PAGE_REQUEST_DELAY_SEC,
    TRACKS_BATCH_SIZE,
    get_logger,
)
from tracklist.retry import with_retry

logger = get_logger("fetch")

T = TypeVar("T")

Page = dict


def chunked(items: Sequence[T], size: int) -> list[list[T]]:
    """Split ``items`` into consecutive lists of at most ``size`` elements."""
    if size <= 0:
        raise ValueError("size must be positive")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def fetch_all_pages(
    request_page: Callable[[], Page],
    next_page: Callable[[Page], Optional[Page]],
    delay: float = PAGE_REQUEST_DELAY_SEC,
    max_attempts: int = PAGE_MAX_RETRIES,
    operation: str = "page fetch",
) -> list:
    """
    Walk a cursor-linked collection and return every item in page order.

    Args:
        request_page: Issues the first page request
        next_page: Issues the request for the page after the given one
        delay: Seconds to wait before each page request
        max_attempts: Rate-limited attempts allowed per page

    A rate-limited page is requested again; other failures propagate.
    """

    def paced(request: Callable[[], Optional[Page]]) -> Callable[[], Optional[Page]]:
        def call() -> Optional[Page]:
            time.sleep(delay)
            return request()

        return call

    items: list = []
    page = with_retry(paced(request_page), max_attempts, operation=operation)
    page_number = 1

    while page:
        page_items = page.get("items") or []
        items.extend(page_items)
        logger.debug(f"{operation}: page {page_number} returned {len(page_items)} items")

        if not page.get("next"):
            break

        current = page
        page = with_retry(paced(lambda: next_page(current)), max_attempts, operation=operation)
        page_number += 1

    return items


def hydrate(
    ids: Iterable[str],
    fetch_batch: Callable[[list[str]], list[Optional[T]]],
    batch_size: int = TRACKS_BATCH_SIZE,
    delay: float = HYDRATE_REQUEST_DELAY_SEC,
    max_attempts: int = HYDRATE_MAX_RETRIES,
    operation: str = "hydration",
) -> list[T]:
    """
    Resolve ids into full records, one bounded batch at a time.

    ``fetch_batch`` returns the upstream records for one chunk, with ``None``
    in place of items that no longer exist; those are dropped.
    """
    ids = list(ids)
    records: list[T] = []

    for index, chunk in enumerate(chunked(ids, batch_size), start=1):

        def call(chunk: list[str] = chunk) -> list[Optional[T]]:
            time.sleep(delay)
            return fetch_batch(chunk)

        batch = with_retry(call, max_attempts, operation=f"{operation} batch {index}")
        records.extend(record for record in batch if record is not None)
        logger.debug(f"{operation}: batch {index} resolved {len(batch)}/{len(chunk)} ids")

    return records
