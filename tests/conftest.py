"""Shared fixtures and factories for tracklist tests."""

import threading
import time

import pytest
from spotipy.exceptions import SpotifyException

from tracklist.clients.spotify_client import SpotifyClient
from tracklist.models import AlbumRef, Artist, Release, Track

ARTIST_ID = "artist123"


@pytest.fixture(autouse=True)
def sleeps(monkeypatch):
    """Record time.sleep calls instead of waiting."""
    recorded = []
    monkeypatch.setattr(time, "sleep", lambda seconds: recorded.append(seconds))
    return recorded


def rate_limited(retry_after="2"):
    headers = {"Retry-After": retry_after} if retry_after is not None else {}
    return SpotifyException(429, -1, "API rate limit exceeded", headers=headers)


def server_error(status=500):
    return SpotifyException(status, -1, "Internal Server Error", headers={})


def make_track(*, id="track1", name="Test Song", artist_ids=(ARTIST_ID,), popularity=50,
               duration_ms=200_000, isrc=None, album_type=None, release_date=None):
    """Build a Track value with sensible defaults."""
    album = None
    if album_type is not None or release_date is not None:
        album = AlbumRef(id=f"album-{id}", name="Album", album_type=album_type, release_date=release_date)
    return Track(
        id=id,
        name=name,
        artists=tuple(Artist(id=artist_id, name=artist_id) for artist_id in artist_ids),
        duration_ms=duration_ms,
        popularity=popularity,
        uri=f"spotify:track:{id}",
        isrc=isrc,
        album=album,
    )


def make_release(*, id="album1", name="Test Album", artist_ids=("artist1",), release_date="2023-01-01",
                 total_tracks=10, album_type="album", markets=None):
    """Build a Release value with sensible defaults."""
    return Release(
        id=id,
        name=name,
        album_type=album_type,
        artists=tuple(Artist(id=artist_id, name=artist_id) for artist_id in artist_ids),
        release_date=release_date,
        total_tracks=total_tracks,
        available_markets=frozenset(markets) if markets is not None else None,
    )


def track_payload(id, name="Test Song", artist_ids=(ARTIST_ID,), duration_ms=200_000, popularity=50, isrc=None):
    payload = {
        "id": id,
        "name": name,
        "uri": f"spotify:track:{id}",
        "artists": [{"id": artist_id, "name": artist_id} for artist_id in artist_ids],
        "duration_ms": duration_ms,
        "popularity": popularity,
    }
    if isrc:
        payload["external_ids"] = {"isrc": isrc}
    return payload


def album_payload(id, name="Test Album", artist_ids=(ARTIST_ID,), album_type="album",
                  release_date="2023-01-01", total_tracks=10, explicit=None):
    payload = {
        "id": id,
        "name": name,
        "album_type": album_type,
        "artists": [{"id": artist_id, "name": artist_id} for artist_id in artist_ids],
        "release_date": release_date,
        "total_tracks": total_tracks,
        "images": [{"url": f"https://img/{id}", "height": 640, "width": 640}],
    }
    if explicit is not None:
        payload["tracks"] = {
            "items": [{"id": f"{id}-t{i}", "name": f"Track {i}", "explicit": flag} for i, flag in enumerate(explicit)]
        }
    return payload


class FakeSpotify:
    """Stand-in for spotipy.Spotify serving canned pages and batch lookups.

    ``failures`` maps a request name (e.g. ``"albums/a1/tracks"`` or
    ``"tracks"``) to a list of exceptions raised, in order, before the
    request succeeds.
    """

    def __init__(self, pages=None, tracks=None, albums=None, failures=None):
        self.pages = pages or {}
        self.track_payloads = tracks or {}
        self.album_payloads = albums or {}
        self.failures = {key: list(errors) for key, errors in (failures or {}).items()}
        self.calls = []
        self._lock = threading.Lock()

    def _request(self, name):
        with self._lock:
            self.calls.append(name)
            errors = self.failures.get(name)
            if errors:
                raise errors.pop(0)

    def _page(self, name):
        self._request(name)
        return self.pages.get(name, {"items": [], "next": None})

    def artist_albums(self, artist_id, include_groups=None, country=None, limit=20, offset=0):
        return self._page(f"artists/{artist_id}/albums")

    def album_tracks(self, album_id, limit=50, offset=0, market=None):
        return self._page(f"albums/{album_id}/tracks")

    def playlist_items(self, playlist_id, fields=None, limit=100, offset=0, market=None, additional_types=("track",)):
        return self._page(f"playlists/{playlist_id}/tracks")

    def next(self, result):
        if not result.get("next"):
            return None
        return self._page(result["next"])

    def tracks(self, tracks, market=None):
        self._request("tracks")
        return {"tracks": [self.track_payloads.get(track_id) for track_id in tracks]}

    def albums(self, albums, market=None):
        self._request("albums")
        return {"albums": [self.album_payloads.get(album_id) for album_id in albums]}


@pytest.fixture
def fake():
    return FakeSpotify()


@pytest.fixture
def client(fake):
    return SpotifyClient(client=fake)
