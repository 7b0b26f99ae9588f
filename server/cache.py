"""In-memory TTL cache for the standards hub.

Entries expire lazily: staleness is only discovered when a key is read.
``cleanup`` sweeps expired entries on demand; nothing runs in the background.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 3600.0


@dataclass
class CacheEntry(Generic[T]):
    """A cached value with its creation and absolute expiry instants."""
    value: T
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


@dataclass
class CacheStats:
    """Hit and miss counters for a cache."""
    hits: int = 0
    misses: int = 0
    expirations: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total


class TTLCache(Generic[T]):
    """Key-value store where every entry carries its own expiry instant."""

    def __init__(self, default_ttl: float = DEFAULT_TTL_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        """Initialize cache.

        Args:
            default_ttl: Lifetime in seconds for entries set without an explicit ttl
            clock: Monotonic time source in seconds
        """
        self.default_ttl = default_ttl
        self._clock = clock
        self._store: Dict[str, CacheEntry[T]] = {}
        self._stats = CacheStats()

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        """Store a value, replacing any existing entry for the key."""
        now = self._clock()
        lifetime = self.default_ttl if ttl is None else ttl
        self._store[key] = CacheEntry(value=value, created_at=now, expires_at=now + lifetime)

    def get(self, key: str, default: Optional[T] = None) -> Optional[T]:
        """Return the live value for a key, or ``default`` if absent or expired."""
        entry = self._store.get(key)
        if entry is None:
            self._stats.misses += 1
            return default

        if entry.is_expired(self._clock()):
            del self._store[key]
            self._stats.expirations += 1
            self._stats.misses += 1
            logger.debug(f"Cache entry expired: {key}")
            return default

        self._stats.hits += 1
        return entry.value

    def has(self, key: str) -> bool:
        """Check for a live entry, evicting it if it has expired."""
        entry = self._store.get(key)
        if entry is None:
            return False
        if entry.is_expired(self._clock()):
            del self._store[key]
            self._stats.expirations += 1
            return False
        return True

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def delete(self, key: str) -> bool:
        """Delete a key, returning whether it was present."""
        return self._store.pop(key, None) is not None

    def clear(self) -> None:
        """Remove every entry."""
        self._store.clear()

    def cleanup(self) -> int:
        """Remove all expired entries and return how many were removed."""
        now = self._clock()
        expired_keys = [key for key, entry in self._store.items() if entry.is_expired(now)]

        for key in expired_keys:
            del self._store[key]

        if expired_keys:
            self._stats.expirations += len(expired_keys)
            logger.debug(f"Removed {len(expired_keys)} expired cache entries")
        return len(expired_keys)

    def size(self) -> int:
        """Number of stored entries, including ones not yet found to be expired."""
        return len(self._store)

    def __len__(self) -> int:
        return self.size()

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        return {
            'size': len(self._store),
            'hits': self._stats.hits,
            'misses': self._stats.misses,
            'expirations': self._stats.expirations,
            'hit_rate': self._stats.hit_rate,
        }
