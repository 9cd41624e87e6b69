"""Ephemeral in-memory key/value cache for memoizing reader output.

The feed core never reads or writes it; callers decide what to memoize and
for how long.
"""

from __future__ import annotations

import copy
import threading
import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any

from kiwi_feed.errors import CacheFull


@dataclass(slots=True)
class CacheEntry:
    value: Any
    expires_at: float | None


@dataclass(slots=True)
class CacheStats:
    """Counters reported by ``MemoryCache.stats``."""

    keys: int = 0
    hits: int = 0
    misses: int = 0


class MemoryCache:
    """Thread-safe dictionary cache with optional per-key TTL.

    ``std_ttl_seconds`` and ``max_keys`` of zero mean "never expire" and
    "unbounded". Values are deep-copied on the way in and out unless
    ``use_clones`` is disabled, so cached views cannot be mutated in place.
    """

    def __init__(
        self,
        *,
        std_ttl_seconds: float = 0,
        max_keys: int = 0,
        use_clones: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if std_ttl_seconds < 0:
            raise ValueError("std_ttl_seconds must be >= 0")
        if max_keys < 0:
            raise ValueError("max_keys must be >= 0")
        self.std_ttl_seconds = std_ttl_seconds
        self.max_keys = max_keys
        self.use_clones = use_clones
        self._clock = clock
        self._entries: dict[Hashable, CacheEntry] = {}
        self._hits = 0
        self._misses = 0
        self._lock = threading.Lock()

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                self._misses += 1
                return default
            self._hits += 1
            return self._clone(entry.value)

    def set(self, key: Hashable, value: Any, ttl: float | None = None) -> None:
        """Store ``value``; ``ttl`` overrides the standard TTL, 0 meaning forever."""

        with self._lock:
            if (
                self.max_keys
                and self._live_entry(key) is None
                and self._purge_expired() >= self.max_keys
            ):
                raise CacheFull(f"Cache max keys amount exceeded ({self.max_keys})")
            self._entries[key] = CacheEntry(
                value=self._clone(value),
                expires_at=self._expires_at(self.std_ttl_seconds if ttl is None else ttl),
            )

    def has(self, key: Hashable) -> bool:
        with self._lock:
            return self._live_entry(key) is not None

    def delete(self, key: Hashable) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def take(self, key: Hashable, default: Any = None) -> Any:
        """Return and remove a value in one step."""

        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                self._misses += 1
                return default
            self._hits += 1
            del self._entries[key]
            return entry.value

    def ttl(self, key: Hashable, ttl: float | None = None) -> bool:
        """Reset the expiry of an existing key. Returns False when the key is absent."""

        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                return False
            entry.expires_at = self._expires_at(self.std_ttl_seconds if ttl is None else ttl)
            return True

    def keys(self) -> list[Hashable]:
        with self._lock:
            self._purge_expired()
            return list(self._entries)

    def flush_all(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(keys=self._purge_expired(), hits=self._hits, misses=self._misses)

    def _live_entry(self, key: Hashable) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at is not None and entry.expires_at <= self._clock():
            del self._entries[key]
            return None
        return entry

    def _purge_expired(self) -> int:
        now = self._clock()
        expired = [
            key
            for key, entry in self._entries.items()
            if entry.expires_at is not None and entry.expires_at <= now
        ]
        for key in expired:
            del self._entries[key]
        return len(self._entries)

    def _expires_at(self, ttl: float) -> float | None:
        if ttl <= 0:
            return None
        return self._clock() + ttl

    def _clone(self, value: Any) -> Any:
        return copy.deepcopy(value) if self.use_clones else value
