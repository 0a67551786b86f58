"""Bounded least-recently-used cache used by generated implementations."""

import threading
from collections import OrderedDict
from typing import Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class LruCache(Generic[K, V]):
    """Thread-safe LRU cache with a fixed entry budget.

    Each call is atomic. A getter's miss-then-populate spans two calls, so
    concurrent callers may both miss and populate; the later write wins.

    ``None`` is never stored: ``get`` returns None for a miss.
    """

    def __init__(self, max_size: int) -> None:
        if max_size < 0:
            raise ValueError(f"max_size must be >= 0, got {max_size}")
        self._max_size = max_size
        self._entries: OrderedDict[K, V] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def get(self, key: K) -> V | None:
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
                self._hits += 1
                return self._entries[key]
            self._misses += 1
            return None

    def put(self, key: K, value: V) -> V | None:
        """Cache ``value``; returns the previous value for ``key``, if any."""
        if value is None:
            raise ValueError("LruCache does not store None")
        with self._lock:
            previous = self._entries.pop(key, None)
            if self._max_size == 0:
                return previous
            self._entries[key] = value
            while len(self._entries) > self._max_size:
                self._entries.popitem(last=False)
                self._evictions += 1
            return previous

    def remove(self, key: K) -> V | None:
        with self._lock:
            return self._entries.pop(key, None)

    def evict_all(self) -> None:
        with self._lock:
            self._entries.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def max_size(self) -> int:
        return self._max_size

    def snapshot(self) -> dict[K, V]:
        """Copy of the entries, least recently used first."""
        with self._lock:
            return dict(self._entries)

    @property
    def hit_count(self) -> int:
        return self._hits

    @property
    def miss_count(self) -> int:
        return self._misses

    @property
    def eviction_count(self) -> int:
        return self._evictions

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        return self.size()

    def __repr__(self) -> str:
        return (
            f"LruCache(max_size={self._max_size}, size={len(self._entries)}, "
            f"hits={self._hits}, misses={self._misses}, evictions={self._evictions})"
        )
