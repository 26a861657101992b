"""Configuration management with secure file storage."""

import json
import os
import stat
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

from tracklist.constants import (
    CACHE_MAX_ENTRIES,
    CACHE_TTL_SEC,
    CONFIG_DIR_MODE,
    CONFIG_FILE_MODE,
    RELEASE_FETCH_WINDOW,
    get_logger,
)

logger = get_logger("config")

CONFIG_DIR = Path.home() / ".config" / "tracklist"
CONFIG_FILE = CONFIG_DIR / "config.json"

# Environment variable → Config field
ENV_OVERRIDES = {
    "SPOTIFY_ACCESS_TOKEN": "access_token",
    "SPOTIFY_CLIENT_ID": "client_id",
    "SPOTIFY_CLIENT_SECRET": "client_secret",
    "SPOTIFY_MARKET": "market",
}


def _chmod(path: Path, mode: int) -> None:
    try:
        os.chmod(path, mode)
    except OSError as e:
        logger.warning(f"Cannot restrict {path} to {oct(mode)}: {e}")


def _write_private_json(path: Path, data: dict) -> None:
    """Write ``data`` where only the owner can read it; credentials live here."""
    path.parent.mkdir(parents=True, exist_ok=True)
    _chmod(path.parent, CONFIG_DIR_MODE)
    path.write_text(json.dumps(data, indent=2))
    _chmod(path, CONFIG_FILE_MODE)


def _warn_if_shared(path: Path) -> None:
    try:
        mode = stat.S_IMODE(path.stat().st_mode)
    except OSError:
        return
    if mode & (stat.S_IRWXG | stat.S_IRWXO):
        logger.warning(f"Credentials file {path} is readable by other users ({oct(mode)}); run chmod 600 {path}")


@dataclass
class Config:
    access_token: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    market: Optional[str] = None
    release_window: int = RELEASE_FETCH_WINDOW
    cache_ttl_sec: int = CACHE_TTL_SEC
    cache_max_entries: int = CACHE_MAX_ENTRIES

    def save(self, path: Path = None) -> None:
        path = path or CONFIG_FILE
        _write_private_json(path, asdict(self))
        logger.debug(f"Config saved to {path}")

    @classmethod
    def load(cls, path: Path = None) -> "Config":
        """Settings from the config file (unknown keys ignored), overridden by SPOTIFY_* variables."""
        path = path or CONFIG_FILE
        config = cls()

        if path.exists():
            _warn_if_shared(path)
            try:
                stored = json.loads(path.read_text())
                known = {field.name for field in fields(cls)}
                config = cls(**{key: value for key, value in stored.items() if key in known})
                logger.debug(f"Config loaded from {path}")
            except (json.JSONDecodeError, TypeError, AttributeError) as e:
                logger.warning(f"Ignoring unreadable config {path}: {e}")

        overrides = {field_name: os.environ.get(env_name) for env_name, field_name in ENV_OVERRIDES.items()}
        for field_name, value in overrides.items():
            if value:
                setattr(config, field_name, value)

        return config
