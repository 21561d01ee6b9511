"""
TTL-based in-memory cache for credentials and provider configuration.

Entries are stored whole and replaced whole: adding a value for an existing
id discards the previous entry before inserting the new one, so a reader
never observes a partially updated value. Expiry is measured in hours, which
matches how the provider tokens and config documents are refreshed.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger("beyond-bridge")

MS_PER_HOUR = 1000 * 60 * 60


def _now_ms() -> float:
    return time.time() * 1000


@dataclass
class CacheEntry:
    """Single cache entry.

    Attributes:
        id: Cache key identifier.
        data: Cached value (token string, config document, ...).
        last_update: Epoch milliseconds when the entry was stored.
    """
    id: str
    data: Any
    last_update: float


def is_cacheable(data: Any) -> bool:
    """Return True if ``data`` is a non-empty string, collection or object.

    Empty strings and collections, ``None`` and bare scalars (numbers,
    booleans) are rejected.
    """
    if data is None or isinstance(data, (bool, int, float, complex)):
        return False
    if isinstance(data, (str, bytes, Sequence, Mapping, set, frozenset)):
        return len(data) > 0
    return True


class SessionCache:
    """Generic expiring key/value store.

    Usage:
        cache = SessionCache("AUTH", ttl_hours=0.08)
        cache.add("user-1", "token-value")
        entry = cache.exists("user-1")
    """

    def __init__(
        self,
        name: str,
        ttl_hours: float = 24,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """Initialize the cache.

        Args:
            name: Label used in log messages.
            ttl_hours: Lifetime of an entry in hours.
            clock: Callable returning the current time in epoch milliseconds.
        """
        self.name = name
        self.ttl_hours = ttl_hours
        self._clock = clock or _now_ms
        self._items: list[CacheEntry] = []

    def is_expired(self, timestamp: float) -> bool:
        """Check whether an entry stamped at ``timestamp`` has expired."""
        return (self._clock() - timestamp) / (MS_PER_HOUR * self.ttl_hours) >= 1

    def exists(self, id: str) -> CacheEntry | None:
        """Return the live entry for ``id``, or None if missing or expired."""
        for entry in self._items:
            if entry.id == id:
                if self.is_expired(entry.last_update):
                    logger.debug(f"[CACHE {self.name}] Entry '{id}' expired")
                    return None
                return entry
        return None

    def get(self, id: str) -> Any | None:
        entry = self.exists(id)
        return entry.data if entry else None

    def add(self, id: str, data: Any) -> CacheEntry | None:
        """Store ``data`` under ``id``, replacing any previous entry.

        Args:
            id: Cache key.
            data: Value to cache. Empty or scalar values are rejected.

        Returns:
            The new CacheEntry, or None if the value was rejected.
        """
        if not is_cacheable(data):
            logger.debug(f"[CACHE {self.name}] Rejected empty or invalid value for '{id}'")
            return None

        size = len(data) if hasattr(data, "__len__") else "N/A"
        logger.debug(f"[CACHE {self.name}] Adding to the cache (ID: {id}): {size} items")

        if any(entry.id == id for entry in self._items):
            logger.debug(f"[CACHE {self.name}] Replacing previous entry for '{id}'")
            self._items = [entry for entry in self._items if entry.id != id]

        entry = CacheEntry(id=id, data=data, last_update=self._clock())
        self._items.append(entry)
        return entry

    def set(self, id: str, data: Any) -> CacheEntry | None:
        return self.add(id, data)

    def clear(self) -> None:
        """Remove all entries."""
        count = len(self._items)
        self._items = []
        if count:
            logger.debug(f"[CACHE {self.name}] Cleared {count} entries")

    @property
    def size(self) -> int:
        """Number of stored entries, including expired ones not yet replaced."""
        return len(self._items)


__all__ = [
    "CacheEntry",
    "SessionCache",
    "is_cacheable",
    "MS_PER_HOUR",
]
