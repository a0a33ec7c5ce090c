from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TTLCache:
    """
    Process-local key-value store with per-entry expiry.

    Entries are evicted lazily: an expired entry stays in memory until the
    next ``get`` for its key. There is no size bound and no background sweep.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[Any, float]] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def set(self, key: str, value: Any, ttl: float) -> None:
        expires_at = self._clock() + ttl
        with self._lock:
            self._entries[key] = (value, expires_at)

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                value, expires_at = entry
                if self._clock() < expires_at:
                    self._hits += 1
                    return value
                del self._entries[key]
            self._misses += 1
        logger.debug("cache miss: %s", key)
        return default

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def get_or_set(self, key: str, factory: Callable[[], T], ttl: float) -> T:
        """Return the cached value for ``key``, computing and storing it on a miss."""
        sentinel = object()
        cached = self.get(key, sentinel)
        if cached is not sentinel:
            return cached
        value = factory()
        self.set(key, value, ttl)
        return value

    @property
    def size(self) -> int:
        """Number of stored entries, expired-but-unread ones included."""
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and self._clock() < entry[1]

    def stats(self) -> dict:
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
            }
