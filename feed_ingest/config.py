"""Configuration for feed_ingest.

Settings come from environment variables:

    FEED_INGEST_DB_PATH         SQLite database file (default ~/.feed_ingest/feed_ingest.db)
    FEED_INGEST_FETCH_TIMEOUT   HTTP timeout in seconds (default 10)
    FEED_INGEST_LOG_LEVEL       Logging level name (default INFO)
    FEED_INGEST_PREVIEW_LENGTH  Content preview length in bytes for listings (default 200)
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


DEFAULT_FETCH_TIMEOUT = 10.0
DEFAULT_PREVIEW_LENGTH = 200


def _default_db_path() -> Path:
    return Path.home() / ".feed_ingest" / "feed_ingest.db"


@dataclass
class Config:
    """Runtime settings."""

    db_path: Path
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    log_level: str = "INFO"
    preview_length: int = DEFAULT_PREVIEW_LENGTH


def _env_number(name: str, default, cast):
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


def load_config() -> Config:
    """Build a Config from the environment.

    Returns:
        A new Config instance

    Raises:
        ValueError: If a numeric variable cannot be parsed
    """
    env_path = os.environ.get("FEED_INGEST_DB_PATH")
    db_path = Path(env_path).expanduser() if env_path else _default_db_path()

    return Config(
        db_path=db_path,
        fetch_timeout=_env_number("FEED_INGEST_FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT, float),
        log_level=os.environ.get("FEED_INGEST_LOG_LEVEL", "INFO").upper(),
        preview_length=_env_number("FEED_INGEST_PREVIEW_LENGTH", DEFAULT_PREVIEW_LENGTH, int),
    )


_config: Optional[Config] = None


def get_config() -> Config:
    """Return the active configuration, loading it on first use."""
    global _config

    if _config is None:
        _config = load_config()

    return _config


def set_config(config: Optional[Config]) -> None:
    """Replace the active configuration (None reloads from the environment on next use)."""
    global _config
    _config = config
