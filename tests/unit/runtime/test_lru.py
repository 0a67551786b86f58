# tests/unit/runtime/test_lru.py
"""Tests for the LRU cache used by generated implementations."""

from __future__ import annotations

import threading

import pytest

from typedprefs.runtime.lru import LruCache


class TestLruCacheBasics:
    """Get, put and remove."""

    def test_miss_returns_none(self) -> None:
        cache: LruCache[str, int] = LruCache(2)
        assert cache.get("missing") is None
        assert cache.miss_count == 1

    def test_put_then_get(self) -> None:
        cache: LruCache[str, int] = LruCache(2)
        assert cache.put("a", 1) is None
        assert cache.get("a") == 1
        assert cache.hit_count == 1

    def test_put_returns_previous_value(self) -> None:
        cache: LruCache[str, int] = LruCache(2)
        cache.put("a", 1)
        assert cache.put("a", 2) == 1
        assert cache.size() == 1

    def test_none_is_rejected(self) -> None:
        cache: LruCache[str, object] = LruCache(2)
        with pytest.raises(ValueError, match="None"):
            cache.put("a", None)

    def test_remove_returns_value_and_shrinks(self) -> None:
        cache: LruCache[str, int] = LruCache(2)
        cache.put("a", 1)
        assert cache.remove("a") == 1
        assert cache.size() == 0
        assert cache.remove("a") is None

    def test_negative_size_rejected(self) -> None:
        with pytest.raises(ValueError, match="max_size"):
            LruCache(-1)

    def test_evict_all(self) -> None:
        cache: LruCache[str, int] = LruCache(3)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.evict_all()
        assert cache.size() == 0
        assert cache.snapshot() == {}


class TestLruCacheEviction:
    """Least recently used entries leave first."""

    def test_oldest_entry_evicted_at_capacity(self) -> None:
        cache: LruCache[str, int] = LruCache(2)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.put("c", 3)
        assert "a" not in cache
        assert list(cache.snapshot()) == ["b", "c"]
        assert cache.eviction_count == 1

    def test_get_refreshes_recency(self) -> None:
        cache: LruCache[str, int] = LruCache(2)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.get("a")
        cache.put("c", 3)
        assert "b" not in cache
        assert list(cache.snapshot()) == ["a", "c"]

    def test_zero_capacity_stores_nothing(self) -> None:
        cache: LruCache[str, int] = LruCache(0)
        cache.put("a", 1)
        assert cache.size() == 0
        assert cache.get("a") is None
        assert cache.max_size() == 0

    def test_repr_mentions_counters(self) -> None:
        cache: LruCache[str, int] = LruCache(1)
        cache.put("a", 1)
        cache.get("a")
        assert "hits=1" in repr(cache)
        assert "max_size=1" in repr(cache)


class TestLruCacheConcurrency:
    """Concurrent puts never exceed the budget."""

    def test_parallel_puts_respect_capacity(self) -> None:
        cache: LruCache[int, int] = LruCache(16)

        def worker(offset: int) -> None:
            for i in range(200):
                cache.put(offset * 1000 + i, i + 1)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert cache.size() == 16
        assert len(cache) == 16
