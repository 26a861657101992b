"""In-memory response cache handed to the collection service."""

from threading import RLock
from typing import Any, Optional

from cachetools import TTLCache

from tracklist.constants import CACHE_MAX_ENTRIES, CACHE_TTL_SEC, get_logger

logger = get_logger("cache")


def artist_tracks_key(artist_id: str, market: Optional[str] = None) -> str:
    """Key for an artist's finished track list; results differ per market."""
    return f"artist:{artist_id}:{market or 'any'}:tracks"


def api_response_key(endpoint: str, params: Optional[dict[str, str]] = None) -> str:
    """Stable key for an endpoint call; parameter order does not matter."""
    param_string = "&".join(f"{k}={v}" for k, v in sorted((params or {}).items()))
    return f"api:{endpoint}:{param_string}"


class ResponseCache:
    """Thread-safe TTL cache with LRU eviction."""

    def __init__(self, maxsize: int = CACHE_MAX_ENTRIES, ttl: float = CACHE_TTL_SEC):
        self._data: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl)
        self._lock = RLock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            value = self._data.get(key)
        logger.debug(f"cache {'hit' if value is not None else 'miss'}: {key}")
        return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def stats(self) -> dict[str, float]:
        with self._lock:
            return {
                "size": len(self._data),
                "maxsize": self._data.maxsize,
                "ttl": self._data.ttl,
            }
