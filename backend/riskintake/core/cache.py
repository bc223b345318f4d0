"""
Expiring cache for parsed form definitions.

Entries carry an absolute expiry deadline on the monotonic clock. Once
the cache is full, the least recently read entry is dropped first.
Hit and miss counters let the repository report how well the cache works.
"""

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class _Entry(Generic[T]):
    value: T
    expires_at: float


@dataclass
class CacheStats:
    """Counters since the cache was created or last cleared."""

    hits: int = 0
    misses: int = 0
    expired: int = 0
    evicted: int = 0

    @property
    def hit_ratio(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0


class TTLCache(Generic[T]):
    """
    Keyed cache with per-entry expiry and a size bound.

    Attributes:
        ttl_seconds: Lifetime of an entry after it is stored.
        max_size: Number of entries kept before evicting.
    """

    def __init__(self, ttl_seconds: int, max_size: int):
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self.stats = CacheStats()
        self._entries: "OrderedDict[str, _Entry[T]]" = OrderedDict()

    def get(self, key: str) -> T | None:
        entry = self._entries.get(key)
        if entry is None:
            self.stats.misses += 1
            return None

        if time.monotonic() >= entry.expires_at:
            del self._entries[key]
            self.stats.expired += 1
            self.stats.misses += 1
            return None

        self._entries.move_to_end(key)
        self.stats.hits += 1
        return entry.value

    def set(self, key: str, value: T) -> None:
        self._entries[key] = _Entry(value, time.monotonic() + self.ttl_seconds)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_size:
            self._entries.popitem(last=False)
            self.stats.evicted += 1

    def invalidate(self, key: str) -> bool:
        """Drop one entry. Returns whether it was present."""
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()
        self.stats = CacheStats()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
