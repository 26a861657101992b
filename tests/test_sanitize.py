"""Tests for sanitize_tracks()."""

from tests.conftest import ARTIST_ID, make_track
from tracklist.sanitize import sanitize_tracks


def names(tracks):
    return [track.name for track in tracks]


def ids(tracks):
    return [track.id for track in tracks]


class TestExclusion:
    def test_live_versions_dropped(self):
        tracks = [
            make_track(id="t1", name="Song Title - Live at Madison Square Garden"),
            make_track(id="t2", name="Song Title (Live)"),
            make_track(id="t3", name="Live Wire"),
            make_track(id="t4", name="Live It Up"),
            make_track(id="t5", name="Normal Song"),
        ]
        assert names(sanitize_tracks(tracks, ARTIST_ID)) == ["Live Wire", "Live It Up", "Normal Song"]

    def test_remixes_dropped(self):
        tracks = [
            make_track(id="t1", name="Song Title (Remix)"),
            make_track(id="t2", name="Song Title - Remixed"),
            make_track(id="t3", name="Song Title (RMX)"),
            make_track(id="t4", name="Remixed Emotions"),
            make_track(id="t5", name="Normal Song"),
        ]
        assert names(sanitize_tracks(tracks, ARTIST_ID)) == ["Remixed Emotions", "Normal Song"]

    def test_instrumental_and_acoustic_dropped(self):
        tracks = [
            make_track(id="t1", name="Song Title (Instrumental Version)"),
            make_track(id="t2", name="Song Title - Acoustic"),
            make_track(id="t3", name="Instrumentality of Man"),
            make_track(id="t4", name="Acoustics 101"),
        ]
        assert names(sanitize_tracks(tracks, ARTIST_ID)) == ["Instrumentality of Man", "Acoustics 101"]


class TestDeduplication:
    def test_same_isrc_keeps_more_popular(self):
        tracks = [
            make_track(id="t1", name="Song Title", isrc="USRC17607839", popularity=60),
            make_track(id="t2", name="Song Title - 2011 Remaster", isrc="USRC17607839", popularity=80),
        ]
        assert ids(sanitize_tracks(tracks, ARTIST_ID)) == ["t2"]

    def test_similar_titles_collapse(self):
        tracks = [
            make_track(id="t1", name="Song Title", popularity=70),
            make_track(id="t2", name="Song Title (Remastered)", popularity=50),
            make_track(id="t3", name="Song Title - Radio Edit", popularity=40),
        ]
        assert ids(sanitize_tracks(tracks, ARTIST_ID)) == ["t1"]

    def test_bracket_only_title_not_merged(self):
        tracks = [
            make_track(id="t1", name="(Intro)", popularity=50),
            make_track(id="t2", name="Normal Song", popularity=60),
        ]
        assert names(sanitize_tracks(tracks, ARTIST_ID)) == ["(Intro)", "Normal Song"]

    def test_different_primary_artists_not_merged(self):
        tracks = [
            make_track(id="t1", name="Song Title", artist_ids=(ARTIST_ID,)),
            make_track(id="t2", name="Song Title", artist_ids=("other",)),
        ]
        assert ids(sanitize_tracks(tracks, ARTIST_ID)) == ["t1", "t2"]

    def test_group_order_is_first_encounter(self):
        tracks = [
            make_track(id="a1", name="Alpha", popularity=10),
            make_track(id="b1", name="Beta", popularity=10),
            make_track(id="a2", name="Alpha", popularity=90),
        ]
        assert ids(sanitize_tracks(tracks, ARTIST_ID)) == ["a2", "b1"]


class TestTieBreaking:
    def test_higher_popularity(self):
        tracks = [
            make_track(id="t1", name="Song Title", popularity=50),
            make_track(id="t2", name="Song Title", popularity=80),
        ]
        assert ids(sanitize_tracks(tracks, ARTIST_ID)) == ["t2"]

    def test_album_over_single(self):
        tracks = [
            make_track(id="t1", name="Song Title", popularity=70, album_type="single"),
            make_track(id="t2", name="Song Title", popularity=70, album_type="album"),
        ]
        assert ids(sanitize_tracks(tracks, ARTIST_ID)) == ["t2"]

    def test_album_over_missing_release(self):
        tracks = [
            make_track(id="t1", name="Song Title", popularity=70),
            make_track(id="t2", name="Song Title", popularity=70, album_type="album"),
        ]
        assert ids(sanitize_tracks(tracks, ARTIST_ID)) == ["t2"]

    def test_earlier_release_date(self):
        tracks = [
            make_track(id="t1", name="Song Title", popularity=70, album_type="album", release_date="2023-01-01"),
            make_track(id="t2", name="Song Title", popularity=70, album_type="album", release_date="2022-01-01"),
        ]
        assert ids(sanitize_tracks(tracks, ARTIST_ID)) == ["t2"]

    def test_shorter_title(self):
        tracks = [
            make_track(id="t1", name="Song Title - Extended Version", popularity=70),
            make_track(id="t2", name="Song Title", popularity=70),
        ]
        assert ids(sanitize_tracks(tracks, ARTIST_ID)) == ["t2"]

    def test_full_tie_keeps_first(self):
        tracks = [
            make_track(id="t1", name="Song Title", popularity=70),
            make_track(id="t2", name="Song Title", popularity=70),
        ]
        assert ids(sanitize_tracks(tracks, ARTIST_ID)) == ["t1"]

    def test_missing_popularity_counts_as_zero(self):
        tracks = [
            make_track(id="t1", name="Song Title", popularity=None, album_type="album"),
            make_track(id="t2", name="Song Title", popularity=1, album_type="single"),
        ]
        assert ids(sanitize_tracks(tracks, ARTIST_ID)) == ["t2"]


class TestEdgeCases:
    def test_empty(self):
        assert sanitize_tracks([], ARTIST_ID) == []

    def test_without_isrc_popularity_or_album(self):
        tracks = [
            make_track(id="t1", name="Song Title", isrc=None, popularity=None),
            make_track(id="t2", name="Another Song", popularity=50),
        ]
        assert len(sanitize_tracks(tracks, ARTIST_ID)) == 2

    def test_input_not_mutated(self):
        tracks = [
            make_track(id="t1", name="Song Title", popularity=50),
            make_track(id="t2", name="Song Title", popularity=80),
        ]
        snapshot = list(tracks)
        sanitize_tracks(tracks, ARTIST_ID)
        assert tracks == snapshot

    def test_idempotent(self):
        tracks = [
            make_track(id="t1", name="Song Title", popularity=50, isrc="X1"),
            make_track(id="t2", name="Song Title - Remastered", popularity=80, isrc="X1"),
            make_track(id="t3", name="Other (Live)"),
            make_track(id="t4", name="Other", popularity=20, album_type="single"),
            make_track(id="t5", name="Other", popularity=20, album_type="album"),
        ]
        once = sanitize_tracks(tracks, ARTIST_ID)
        assert sanitize_tracks(once, ARTIST_ID) == once
        assert ids(once) == ["t2", "t5"]
