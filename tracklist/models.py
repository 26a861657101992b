from dataclasses import dataclass
from typing import Optional

from tracklist.normalize import normalize_title


@dataclass(frozen=True)
class Artist:
    id: str
    name: str


@dataclass(frozen=True)
class Image:
    url: str
    height: Optional[int] = None
    width: Optional[int] = None


@dataclass(frozen=True)
class AlbumRef:
    """Release a track was found on."""

    id: str
    name: str
    album_type: Optional[str] = None
    release_date: Optional[str] = None


@dataclass(frozen=True)
class Track:
    """Track representation shared by every pipeline stage."""

    id: str
    name: str
    artists: tuple[Artist, ...]
    duration_ms: int = 0
    popularity: Optional[int] = None
    uri: str = ""
    isrc: Optional[str] = None
    album: Optional[AlbumRef] = None

    @property
    def primary_artist(self) -> Optional[Artist]:
        return self.artists[0] if self.artists else None

    @property
    def dedup_key(self) -> tuple:
        """Recording code when known, else normalized title scoped to the primary artist."""

        if self.isrc:
            return ("isrc", self.isrc.upper())
        artist_id = self.primary_artist.id if self.primary_artist else ""
        return ("title", normalize_title(self.name), artist_id)


@dataclass(frozen=True)
class Release:
    """Album, single or compilation as listed by the catalog."""

    id: str
    name: str
    album_type: str
    artists: tuple[Artist, ...]
    release_date: str = ""
    total_tracks: int = 0
    available_markets: Optional[frozenset[str]] = None
    images: tuple[Image, ...] = ()

    @property
    def year(self) -> str:
        return self.release_date[:4] if self.release_date else ""

    @property
    def dedup_key(self) -> tuple:
        """Two releases are exact duplicates when all five fields match."""

        artist_part = ",".join(sorted(artist.id for artist in self.artists))
        return (
            self.name.lower().strip(),
            artist_part,
            self.year,
            self.total_tracks,
            self.album_type,
        )

    def is_available_in(self, market: Optional[str]) -> bool:
        if not market or self.available_markets is None:
            return True
        return market in self.available_markets

    def as_ref(self) -> AlbumRef:
        return AlbumRef(
            id=self.id,
            name=self.name,
            album_type=self.album_type,
            release_date=self.release_date or None,
        )


@dataclass(frozen=True)
class ReleaseTrack:
    id: str
    name: str
    explicit: bool = False


@dataclass(frozen=True)
class ReleaseDetails:
    """Full release record including its track listing."""

    release: Release
    tracks: tuple[ReleaseTrack, ...] = ()

    @property
    def explicit_count(self) -> int:
        return sum(1 for track in self.tracks if track.explicit)
