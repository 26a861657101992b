"""Collapse duplicate release listings (re-issues, regional copies, clean/explicit twins).

Releases are exact duplicates when title, artist ids, release year, declared
track count and release type all match. Two resolution strategies exist:

* ``collapse_exact_duplicates_fast`` ranks on listing data only.
* ``collapse_exact_duplicates_prefer_explicit`` fetches full records for the
  duplicate groups and prefers the release with the most explicit tracks.

The explicit track count is deliberately absent from the fast ranking: it is
only visible in the full records.
"""

import time
from functools import cmp_to_key
from typing import Iterable, Optional

from tracklist.constants import ALBUM_BATCH_DELAY_SEC, ALBUM_BATCH_SIZE, ALBUM_MAX_RETRIES, get_logger
from tracklist.fetch import chunked
from tracklist.models import Release, ReleaseDetails
from tracklist.retry import with_retry

logger = get_logger("albums")


def group_by_key(releases: Iterable[Release]) -> dict[tuple, list[Release]]:
    groups: dict[tuple, list[Release]] = {}
    for release in releases:
        groups.setdefault(release.dedup_key, []).append(release)
    return groups


def _compare_ids(a: str, b: str) -> int:
    return (a > b) - (a < b)


def _compare_releases(a: Release, b: Release, market: Optional[str]) -> int:
    """Negative when ``a`` is preferred: available in market, newer, lower id."""
    if market:
        a_available = a.is_available_in(market)
        b_available = b.is_available_in(market)
        if a_available != b_available:
            return -1 if a_available else 1

    if a.release_date != b.release_date:
        if not a.release_date:
            return 1
        if not b.release_date:
            return -1
        return -1 if a.release_date > b.release_date else 1

    return _compare_ids(a.id, b.id)


def _compare_details(a: ReleaseDetails, b: ReleaseDetails, market: Optional[str]) -> int:
    if a.explicit_count != b.explicit_count:
        return -1 if a.explicit_count > b.explicit_count else 1
    return _compare_releases(a.release, b.release, market)


def select_best_release(group: list[Release], market: Optional[str] = None) -> Release:
    if len(group) == 1:
        return group[0]
    return sorted(group, key=cmp_to_key(lambda a, b: _compare_releases(a, b, market)))[0]


def select_best_details(group: list[ReleaseDetails], market: Optional[str] = None) -> ReleaseDetails:
    if len(group) == 1:
        return group[0]
    return sorted(group, key=cmp_to_key(lambda a, b: _compare_details(a, b, market)))[0]


def collapse_exact_duplicates_fast(releases: Iterable[Release], market: Optional[str] = None) -> list[Release]:
    """Keep one release per duplicate group using listing data only. No network access."""
    return [select_best_release(group, market) for group in group_by_key(releases).values()]


def fetch_release_details(client, release_ids: list[str]) -> dict[str, ReleaseDetails]:
    """Full records for ``release_ids``, fetched in paced batches of ``ALBUM_BATCH_SIZE``."""
    details: dict[str, ReleaseDetails] = {}
    batches = chunked(release_ids, ALBUM_BATCH_SIZE)

    for index, batch in enumerate(batches, start=1):
        records = with_retry(
            lambda batch=batch: client.release_details_batch(batch),
            ALBUM_MAX_RETRIES,
            operation=f"album details batch {index}",
        )
        for record in records:
            if record is not None:
                details[record.release.id] = record

        # Small delay between batches to stay under the rate limit
        if index < len(batches):
            time.sleep(ALBUM_BATCH_DELAY_SEC)

    return details


def collapse_exact_duplicates_prefer_explicit(
    client,
    releases: Iterable[Release],
    market: Optional[str] = None,
) -> list[Release]:
    """
    Keep one release per duplicate group, preferring the most explicit edition.

    Singleton groups pass through without any request. Members of duplicate
    groups are looked up through ``client.release_details_batch``; a group
    none of whose members resolved keeps its first listed release.
    """
    releases = list(releases)
    result: list[Release] = []
    duplicate_groups: list[list[Release]] = []

    for group in group_by_key(releases).values():
        if len(group) == 1:
            result.append(group[0])
        else:
            duplicate_groups.append(group)

    if not duplicate_groups:
        return releases

    duplicate_ids = [release.id for group in duplicate_groups for release in group]
    logger.debug(f"Fetching details for {len(duplicate_ids)} releases in {len(duplicate_groups)} duplicate groups")
    details = fetch_release_details(client, duplicate_ids)

    for group in duplicate_groups:
        resolved = [details[release.id] for release in group if release.id in details]
        if resolved:
            result.append(select_best_details(resolved, market).release)
        else:
            logger.warning(f"No details resolved for duplicate group {group[0].name!r}, keeping first entry")
            result.append(group[0])

    return result
