import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv
from spotipy.oauth2 import SpotifyClientCredentials

from tracklist.cache import ResponseCache
from tracklist.clients.spotify_client import SpotifyClient
from tracklist.config import Config
from tracklist.constants import get_logger, setup_logging
from tracklist.errors import TracklistError
from tracklist.service import CollectionService

logger = get_logger("cli")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Collect an artist's canonical Spotify tracks and albums")
    parser.add_argument("--market", help="ISO 3166-1 market code (e.g. US)")
    parser.add_argument("--env-file", default=".env", help="Path to .env file with credentials")
    parser.add_argument("--save-config", action="store_true", help="Persist the effective settings to the config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    tracks = subparsers.add_parser("tracks", help="List the artist's sanitized primary tracks")
    tracks.add_argument("artist_id", help="Spotify artist ID (e.g. 0OdUWJ0sBjDrqHygGUXeCF)")

    albums = subparsers.add_parser("albums", help="List the artist's albums with duplicates collapsed")
    albums.add_argument("artist_id", help="Spotify artist ID")
    albums.add_argument(
        "--prefer-explicit",
        action="store_true",
        help="Fetch album details to prefer explicit editions (extra API calls)",
    )

    album_tracks = subparsers.add_parser("album-tracks", help="List an album's playable tracks")
    album_tracks.add_argument("album_id", help="Spotify album ID")

    playlist_tracks = subparsers.add_parser("playlist-tracks", help="List a playlist's playable tracks")
    playlist_tracks.add_argument("playlist_id", help="Spotify playlist ID")
    return parser.parse_args(argv)


def load_environment(env_file: str) -> None:
    env_path = Path(env_file)
    if env_path.exists():
        load_dotenv(env_path)


def build_client(config: Config) -> SpotifyClient:
    if config.access_token:
        return SpotifyClient(auth=config.access_token, market=config.market)
    if not (config.client_id and config.client_secret):
        raise SystemExit("Set SPOTIFY_ACCESS_TOKEN or SPOTIFY_CLIENT_ID/SPOTIFY_CLIENT_SECRET")
    auth_manager = SpotifyClientCredentials(client_id=config.client_id, client_secret=config.client_secret)
    return SpotifyClient(auth_manager=auth_manager, market=config.market)


def print_tracks(tracks) -> None:
    for track in tracks:
        album = track.album.name if track.album else "-"
        print(f"{track.popularity or 0:>3}  {track.name}  [{album}]  {track.uri}")
    print(f"Collected {len(tracks)} tracks")


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)
    load_environment(args.env_file)

    config = Config.load()
    if args.market:
        config.market = args.market
    if args.save_config:
        config.save()

    cache = ResponseCache(maxsize=config.cache_max_entries, ttl=config.cache_ttl_sec)
    service = CollectionService(build_client(config), cache=cache, window=config.release_window)

    try:
        if args.command == "tracks":
            print_tracks(service.collect_primary_tracks(args.artist_id))
        elif args.command == "album-tracks":
            print_tracks(service.collect_album_tracks(args.album_id))
        elif args.command == "playlist-tracks":
            print_tracks(service.collect_playlist_tracks(args.playlist_id))
        else:
            albums = service.collect_albums(args.artist_id, prefer_explicit=args.prefer_explicit)
            for album in albums:
                print(f"{album.release_date or '----':<10}  {album.name}  ({album.total_tracks} tracks)  {album.id}")
            print(f"Collected {len(albums)} albums")
    except TracklistError as e:
        logger.error(f"Collection failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        logger.debug(f"Response cache: {cache.stats()}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
