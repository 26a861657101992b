"""Constants and configuration for the track collector."""

import logging
import sys

# --- Upstream batch ceilings ---
TRACKS_BATCH_SIZE = 50
ALBUM_BATCH_SIZE = 20
PAGE_LIMIT = 50

# --- Pacing (seconds) ---
PAGE_REQUEST_DELAY_SEC = 0.05
HYDRATE_REQUEST_DELAY_SEC = 0.1
ALBUM_BATCH_DELAY_SEC = 0.1

# --- Rate limiting ---
RATE_LIMIT_DEFAULT_DELAY_SEC = 1.0
PAGE_MAX_RETRIES = 5
HYDRATE_MAX_RETRIES = 3
ALBUM_MAX_RETRIES = 3

# --- Parallelism ---
RELEASE_FETCH_WINDOW = 5

# --- Filtering ---
MIN_TRACK_DURATION_MS = 30_000
ARTIST_RELEASE_GROUPS = "album,single"
ARTIST_ALBUM_GROUPS = "album,compilation"

# --- Cache ---
CACHE_TTL_SEC = 24 * 60 * 60
CACHE_MAX_ENTRIES = 1000

# --- File permissions (octal) ---
CONFIG_FILE_MODE = 0o600  # Owner read/write only
CONFIG_DIR_MODE = 0o700   # Owner read/write/execute only

# --- Logging ---
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.WARNING

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    logger = logging.getLogger("tracklist")
    logger.setLevel(level)

    # Suppress noisy third-party loggers
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("spotipy").setLevel(logging.WARNING)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific module."""
    return logging.getLogger(f"tracklist.{name}")
