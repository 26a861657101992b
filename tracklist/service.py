from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from typing import Optional

from tracklist.albums import collapse_exact_duplicates_fast, collapse_exact_duplicates_prefer_explicit
from tracklist.cache import ResponseCache, api_response_key, artist_tracks_key
from tracklist.clients.spotify_client import SpotifyClient
from tracklist.constants import (
    ARTIST_ALBUM_GROUPS,
    ARTIST_RELEASE_GROUPS,
    MIN_TRACK_DURATION_MS,
    RELEASE_FETCH_WINDOW,
    get_logger,
)
from tracklist.fetch import chunked
from tracklist.models import Release, Track
from tracklist.sanitize import sanitize_tracks

logger = get_logger("service")


class CollectionService:
    """Collects an artist's catalog and reduces it to playable, duplicate-free lists."""

    def __init__(
        self,
        client: SpotifyClient,
        cache: Optional[ResponseCache] = None,
        window: int = RELEASE_FETCH_WINDOW,
        min_duration_ms: int = MIN_TRACK_DURATION_MS,
    ):
        self.client = client
        self.cache = cache
        self.window = window
        self.min_duration_ms = min_duration_ms

    def collect_primary_tracks(self, artist_id: str) -> list[Track]:
        """
        Every track the artist is the primary credit on, one per recording.

        Any failing stage aborts the whole call; nothing partial is returned.
        """
        cache_key = artist_tracks_key(artist_id, self.client.market)
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return list(cached)

        releases = self.client.artist_releases(artist_id, include_groups=ARTIST_RELEASE_GROUPS)
        logger.info(f"Artist {artist_id}: {len(releases)} releases")

        listings = self._fetch_release_tracks(releases)

        origin: dict[str, Release] = {}
        unique: list[Track] = []
        for release in releases:
            for track in listings[release.id]:
                if track.id in origin:
                    continue
                origin[track.id] = release
                unique.append(track)

        primary_ids = [
            track.id for track in unique
            if track.primary_artist is not None and track.primary_artist.id == artist_id
        ]
        logger.info(f"Artist {artist_id}: {len(unique)} unique tracks, {len(primary_ids)} as primary artist")

        hydrated = self.client.hydrate_tracks(primary_ids)

        tracks = [
            replace(track, album=origin[track.id].as_ref()) if track.id in origin else track
            for track in self._playable(hydrated)
        ]

        result = sanitize_tracks(tracks, artist_id)
        logger.info(f"Artist {artist_id}: {len(result)} tracks after sanitizing")

        if self.cache is not None:
            self.cache.set(cache_key, tuple(result))
        return result

    def _fetch_release_tracks(self, releases: list[Release]) -> dict[str, list[Track]]:
        """Track listings keyed by release id, fetched ``window`` releases at a time."""
        listings: dict[str, list[Track]] = {}
        pending: dict[str, Release] = {}

        for release in releases:
            if release.id in listings or release.id in pending:
                continue
            cached = self.cache.get(self._listing_key(release.id)) if self.cache is not None else None
            if cached is not None:
                listings[release.id] = list(cached)
            else:
                pending[release.id] = release

        if not pending:
            return listings

        with ThreadPoolExecutor(max_workers=self.window) as executor:
            for window in chunked(list(pending.values()), self.window):
                futures = {executor.submit(self.client.release_tracks, release.id): release for release in window}
                for future in as_completed(futures):
                    release = futures[future]
                    listings[release.id] = future.result()
                    if self.cache is not None:
                        self.cache.set(self._listing_key(release.id), tuple(listings[release.id]))
                logger.debug(f"Fetched track listings for {len(window)} releases")

        return listings

    def _listing_key(self, release_id: str) -> str:
        return api_response_key("album-tracks", {"albumId": release_id, "market": self.client.market or "any"})

    def _playable(self, tracks: list[Track]) -> list[Track]:
        return [track for track in tracks if track.duration_ms >= self.min_duration_ms]

    def collect_album_tracks(self, album_id: str) -> list[Track]:
        """Hydrated tracks of one album, shorter clips dropped, in album order."""
        listing = self.client.release_tracks(album_id)
        hydrated = self.client.hydrate_tracks([track.id for track in listing])
        tracks = self._playable(hydrated)
        logger.info(f"Album {album_id}: {len(listing)} tracks, {len(tracks)} playable")
        return tracks

    def collect_playlist_tracks(self, playlist_id: str) -> list[Track]:
        """Catalog tracks of a playlist, shorter clips dropped, in playlist order."""
        listing = self.client.playlist_tracks(playlist_id)
        tracks = self._playable(listing)
        logger.info(f"Playlist {playlist_id}: {len(listing)} tracks, {len(tracks)} playable")
        return tracks

    def collect_albums(self, artist_id: str, prefer_explicit: bool = False) -> list[Release]:
        """The artist's albums and compilations with exact duplicates collapsed."""
        releases = self.client.artist_releases(artist_id, include_groups=ARTIST_ALBUM_GROUPS)
        if prefer_explicit:
            albums = collapse_exact_duplicates_prefer_explicit(self.client, releases, market=self.client.market)
        else:
            albums = collapse_exact_duplicates_fast(releases, market=self.client.market)
        logger.info(f"Artist {artist_id}: {len(releases)} albums, {len(albums)} after collapsing duplicates")
        return albums

    def invalidate_artist(self, artist_id: str) -> None:
        if self.cache is not None:
            self.cache.delete(artist_tracks_key(artist_id, self.client.market))
