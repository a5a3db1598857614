"""In-memory TTL cache for live delay boards.

The trip query service keeps each station's live board for a short
while (two minutes by default) so repeated requests from the same
origin do not hit the delay supplier every time.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, NamedTuple, Optional, TypeVar

T = TypeVar("T")


class _Entry(NamedTuple):
    value: Any
    expires_at: float


@dataclass
class InMemoryCache(Generic[T]):
    """Thread-safe CachePort with per-entry expiry.

    Attributes:
        default_ttl_seconds: Lifetime of an entry (None = never expires)
        max_size: Entry bound; the oldest entry is dropped first (None = unbounded)
        name: Logger suffix
        clock: Monotonic seconds, injectable for tests

    Example:
        cache = InMemoryCache[dict](name="live_delay", default_ttl_seconds=120)
        board = cache.get_or_compute("live:1000", lambda: source.delays_for_station("1000"))
    """

    default_ttl_seconds: Optional[float] = None
    max_size: Optional[int] = None
    name: str = "cache"
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)

    _entries: Dict[str, _Entry] = field(default_factory=dict, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)
    _hits: int = field(default=0, repr=False)
    _misses: int = field(default=0, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(f"railquery.cache.{self.name}")

    def _expires_at(self, ttl: Optional[float]) -> float:
        lifetime = self.default_ttl_seconds if ttl is None else ttl
        return float("inf") if lifetime is None else self.clock() + lifetime

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self.clock() >= entry.expires_at:
                del self._entries[key]
                self._logger.debug("Cache entry expired", extra={"key": key})
                entry = None
            if entry is None:
                self._misses += 1
                return None
            self._hits += 1
            return entry.value

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        with self._lock:
            full = self.max_size is not None and len(self._entries) >= self.max_size
            if full and key not in self._entries:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                self._logger.debug("Cache evicted entry", extra={"key": oldest})
            self._entries[key] = _Entry(value, self._expires_at(ttl))

    def get_or_compute(self, key: str, compute_fn: Callable[[], T]) -> T:
        """Return the cached value, computing and storing it on a miss.

        ``compute_fn`` runs outside the lock and its exceptions propagate
        without caching anything.
        """
        cached = self.get(key)
        if cached is not None:
            return cached
        self._logger.debug("Cache miss, fetching", extra={"key": key})
        value = compute_fn()
        self.set(key, value)
        return value

    def invalidate(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        with self._lock:
            dropped = len(self._entries)
            self._entries.clear()
            self._hits = self._misses = 0
        self._logger.info("Cache cleared", extra={"entries_cleared": dropped})
        return dropped

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> Dict[str, Any]:
        """Hit and miss counters since the last clear."""
        with self._lock:
            lookups = self._hits + self._misses
            return {
                "size": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate_percent": round(self._hits * 100 / lookups, 1) if lookups else 0.0,
            }
