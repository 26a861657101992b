from typing import Any, Callable, Iterable, Optional, TypeVar

import requests
import spotipy
from spotipy.exceptions import SpotifyException

from tracklist.constants import (
    ALBUM_BATCH_SIZE,
    ARTIST_RELEASE_GROUPS,
    PAGE_LIMIT,
    TRACKS_BATCH_SIZE,
    get_logger,
)
from tracklist.errors import BatchSizeExceeded, RateLimited, UpstreamRequestFailed
from tracklist.fetch import fetch_all_pages, hydrate
from tracklist.models import AlbumRef, Artist, Image, Release, ReleaseDetails, ReleaseTrack, Track

logger = get_logger("spotify")

T = TypeVar("T")


def _retry_after(headers: Optional[dict]) -> Optional[float]:
    if not headers:
        return None
    value = headers.get("Retry-After")
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


class SpotifyClient:
    """Thin wrapper around the Spotify Web API tailored for catalog collection."""

    def __init__(
        self,
        auth: str | None = None,
        auth_manager: Any = None,
        market: str | None = None,
        client: Any = None,
        requests_timeout: int = 10,
    ):
        self.market = market
        # A plain session has no status retries mounted, so 429 responses
        # reach us with their Retry-After header intact.
        self.client = client or spotipy.Spotify(
            auth=auth,
            auth_manager=auth_manager,
            requests_session=requests.Session(),
            requests_timeout=requests_timeout,
        )

    # --- transport ---

    def _call(self, fn: Callable[..., T], *args, **kwargs) -> T:
        """Invoke a spotipy method, translating its failures into pipeline errors."""
        try:
            return fn(*args, **kwargs)
        except SpotifyException as e:
            if e.http_status == 429:
                raise RateLimited(_retry_after(e.headers)) from e
            logger.error(f"Spotify request failed: {e.http_status} {e.msg}")
            raise UpstreamRequestFailed(e.http_status, e.msg) from e
        except requests.RequestException as e:
            logger.error(f"Spotify request failed: {e}")
            raise UpstreamRequestFailed(None, str(e)) from e

    def _next(self, page: dict) -> Optional[dict]:
        return self._call(self.client.next, page)

    # --- paginated collections ---

    def artist_releases(self, artist_id: str, include_groups: str = ARTIST_RELEASE_GROUPS) -> list[Release]:
        items = fetch_all_pages(
            lambda: self._call(
                self.client.artist_albums,
                artist_id,
                include_groups=include_groups,
                country=self.market,
                limit=PAGE_LIMIT,
            ),
            self._next,
            operation=f"artist {artist_id} releases",
        )
        return [release for release in map(self._parse_release, items) if release]

    def release_tracks(self, release_id: str) -> list[Track]:
        items = fetch_all_pages(
            lambda: self._call(self.client.album_tracks, release_id, limit=PAGE_LIMIT, market=self.market),
            self._next,
            operation=f"release {release_id} tracks",
        )
        return [track for track in map(self._parse_track, items) if track]

    def playlist_tracks(self, playlist_id: str) -> list[Track]:
        """Playable catalog tracks of a playlist; local files and episodes are skipped."""
        items = fetch_all_pages(
            lambda: self._call(
                self.client.playlist_items,
                playlist_id,
                limit=PAGE_LIMIT,
                market=self.market,
                additional_types=("track",),
            ),
            self._next,
            operation=f"playlist {playlist_id} tracks",
        )
        return [track for track in map(self._parse_playlist_item, items) if track]

    # --- batch lookups ---

    def tracks_batch(self, track_ids: list[str]) -> list[Optional[Track]]:
        if len(track_ids) > TRACKS_BATCH_SIZE:
            raise BatchSizeExceeded(len(track_ids), TRACKS_BATCH_SIZE)
        if not track_ids:
            return []
        data = self._call(self.client.tracks, track_ids, market=self.market)
        return [self._parse_track(item) for item in data.get("tracks") or []]

    def hydrate_tracks(self, track_ids: Iterable[str]) -> list[Track]:
        return hydrate(track_ids, self.tracks_batch, batch_size=TRACKS_BATCH_SIZE, operation="track hydration")

    def release_details_batch(self, release_ids: list[str]) -> list[Optional[ReleaseDetails]]:
        if len(release_ids) > ALBUM_BATCH_SIZE:
            raise BatchSizeExceeded(len(release_ids), ALBUM_BATCH_SIZE)
        if not release_ids:
            return []
        data = self._call(self.client.albums, release_ids, market=self.market)
        return [self._parse_release_details(item) for item in data.get("albums") or []]

    # --- wire shapes ---

    @staticmethod
    def _parse_artists(items: Optional[list]) -> tuple[Artist, ...]:
        return tuple(
            Artist(id=artist.get("id") or "", name=artist.get("name") or "")
            for artist in items or []
            if artist
        )

    @staticmethod
    def _parse_images(items: Optional[list]) -> tuple[Image, ...]:
        return tuple(
            Image(url=image["url"], height=image.get("height"), width=image.get("width"))
            for image in items or []
            if image and image.get("url")
        )

    @classmethod
    def _parse_track(cls, item: Optional[dict]) -> Optional[Track]:
        if not item or not item.get("id"):
            return None
        album = item.get("album")
        album_ref = None
        if album and album.get("id"):
            album_ref = AlbumRef(
                id=album["id"],
                name=album.get("name") or "",
                album_type=album.get("album_type"),
                release_date=album.get("release_date") or None,
            )
        return Track(
            id=item["id"],
            name=item.get("name") or "",
            artists=cls._parse_artists(item.get("artists")),
            duration_ms=item.get("duration_ms") or 0,
            popularity=item.get("popularity"),
            uri=item.get("uri") or f"spotify:track:{item['id']}",
            isrc=(item.get("external_ids") or {}).get("isrc"),
            album=album_ref,
        )

    @classmethod
    def _parse_playlist_item(cls, item: Optional[dict]) -> Optional[Track]:
        if not item or item.get("is_local"):
            return None
        entry = item.get("track")
        if not entry or entry.get("is_local") or entry.get("type", "track") != "track":
            return None
        track = cls._parse_track(entry)
        if track is None or not track.name or not track.artists:
            return None
        return track

    @classmethod
    def _parse_release(cls, item: Optional[dict]) -> Optional[Release]:
        if not item or not item.get("id"):
            return None
        markets = item.get("available_markets")
        return Release(
            id=item["id"],
            name=item.get("name") or "",
            album_type=item.get("album_type") or "",
            artists=cls._parse_artists(item.get("artists")),
            release_date=item.get("release_date") or "",
            total_tracks=item.get("total_tracks") or 0,
            available_markets=frozenset(markets) if markets is not None else None,
            images=cls._parse_images(item.get("images")),
        )

    @classmethod
    def _parse_release_details(cls, item: Optional[dict]) -> Optional[ReleaseDetails]:
        release = cls._parse_release(item)
        if release is None:
            return None
        tracks = tuple(
            ReleaseTrack(id=track.get("id") or "", name=track.get("name") or "", explicit=bool(track.get("explicit")))
            for track in (item.get("tracks") or {}).get("items") or []
            if track
        )
        return ReleaseDetails(release=release, tracks=tracks)
