"""Reduce an artist's raw track list to one canonical track per recording."""

from typing import Iterable

from tracklist.constants import get_logger
from tracklist.models import Track
from tracklist.normalize import is_alternate_version

logger = get_logger("sanitize")


def _prefer(candidate: Track, current: Track) -> bool:
    """True when ``candidate`` should replace ``current`` as a group's representative."""
    candidate_popularity = candidate.popularity or 0
    current_popularity = current.popularity or 0
    if candidate_popularity != current_popularity:
        return candidate_popularity > current_popularity

    candidate_is_album = bool(candidate.album and candidate.album.album_type == "album")
    current_is_album = bool(current.album and current.album.album_type == "album")
    if candidate_is_album != current_is_album:
        return candidate_is_album

    candidate_date = candidate.album.release_date if candidate.album else None
    current_date = current.album.release_date if current.album else None
    if candidate_date and current_date and candidate_date != current_date:
        return candidate_date < current_date

    if len(candidate.name) != len(current.name):
        return len(candidate.name) < len(current.name)

    # Full tie: the earlier track stays.
    return False


def sanitize_tracks(tracks: Iterable[Track], primary_artist_id: str) -> list[Track]:
    """
    Drop alternate versions and collapse duplicates of the same recording.

    Groups are keyed by ISRC, or by normalized title plus primary artist when
    no ISRC is known. Output keeps the order in which groups first appear.
    """
    best: dict[tuple, Track] = {}
    excluded = 0

    for track in tracks:
        if is_alternate_version(track.name):
            excluded += 1
            continue
        key = track.dedup_key
        current = best.get(key)
        if current is None or _prefer(track, current):
            best[key] = track

    result = list(best.values())
    logger.debug(
        f"Sanitized tracks for {primary_artist_id}: "
        f"{excluded} alternate versions dropped, {len(result)} kept"
    )
    return result
