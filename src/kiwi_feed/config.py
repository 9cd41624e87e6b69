"""Runtime configuration for the feed store, reader and cache."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from kiwi_feed.identifiers import DEFAULT_NAMESPACE

DEFAULT_DB_FILENAME = "database.db"
THREE_WEEKS_SECONDS = 1_814_400


@dataclass(slots=True)
class FeedSettings:
    """Read-time windowing settings."""

    window_seconds: int = THREE_WEEKS_SECONDS
    newest_limit: int = 30


@dataclass(slots=True)
class CacheSettings:
    """In-memory cache settings. Zero means unlimited."""

    std_ttl_seconds: int = 0
    max_keys: int = 0


@dataclass(slots=True)
class Settings:
    """Application settings grouped by domain concerns."""

    db_path: Path = Path(".kiwi_feed.db")
    id_namespace: str = DEFAULT_NAMESPACE
    sqlite_busy_timeout_ms: int = 5_000
    feed: FeedSettings = field(default_factory=FeedSettings)
    cache: CacheSettings = field(default_factory=CacheSettings)

    @classmethod
    def from_env(cls, db_path: Path | None = None) -> Settings:
        """Load settings from environment with sane defaults for local development."""

        settings = cls(
            db_path=db_path or _default_db_path(),
            id_namespace=os.getenv("KIWI_FEED_ID_NAMESPACE", DEFAULT_NAMESPACE).strip(),
            sqlite_busy_timeout_ms=_env_int("KIWI_FEED_SQLITE_BUSY_TIMEOUT_MS", 5_000),
            feed=FeedSettings(
                window_seconds=_env_int("KIWI_FEED_WINDOW_SECONDS", THREE_WEEKS_SECONDS),
                newest_limit=_env_int("KIWI_FEED_NEWEST_LIMIT", 30),
            ),
            cache=CacheSettings(
                std_ttl_seconds=_env_int("KIWI_FEED_CACHE_TTL_SECONDS", 0),
                max_keys=_env_int("KIWI_FEED_CACHE_MAX_KEYS", 0),
            ),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        """Raise configuration error if any setting is out of range."""

        if not self.id_namespace or ":" in self.id_namespace:
            raise ValueError(
                "KIWI_FEED_ID_NAMESPACE must be non-empty and must not contain ':'.",
            )
        if self.sqlite_busy_timeout_ms <= 0:
            raise ValueError("KIWI_FEED_SQLITE_BUSY_TIMEOUT_MS must be > 0.")
        if self.feed.window_seconds <= 0:
            raise ValueError("KIWI_FEED_WINDOW_SECONDS must be > 0.")
        if self.feed.newest_limit <= 0:
            raise ValueError("KIWI_FEED_NEWEST_LIMIT must be > 0.")
        if self.cache.std_ttl_seconds < 0:
            raise ValueError("KIWI_FEED_CACHE_TTL_SECONDS must be >= 0.")
        if self.cache.max_keys < 0:
            raise ValueError("KIWI_FEED_CACHE_MAX_KEYS must be >= 0.")


def _default_db_path() -> Path:
    explicit = os.getenv("KIWI_FEED_DB_PATH", "").strip()
    if explicit:
        return Path(explicit)
    cache_dir = os.getenv("CACHE_DIR", "").strip()
    if cache_dir:
        return Path(cache_dir) / DEFAULT_DB_FILENAME
    return Path(".kiwi_feed.db")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError as error:
        raise ValueError(f"Invalid integer value for {name}: {raw!r}") from error
