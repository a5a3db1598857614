"""Tests for the cache adapters."""

import pytest

from railquery.adapters.cache import InMemoryCache, NullCache


class FakeTime:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def fake_time():
    return FakeTime()


class TestInMemoryCache:
    """Tests for InMemoryCache."""

    def test_set_and_get(self):
        """Stored values come back."""
        cache = InMemoryCache()
        cache.set("live:1000", {"152": 5})
        assert cache.get("live:1000") == {"152": 5}
        assert cache.get("live:3300") is None

    def test_entries_expire(self, fake_time):
        """Entries disappear once their TTL has passed."""
        cache = InMemoryCache(default_ttl_seconds=120, clock=fake_time)
        cache.set("live:1000", {})
        fake_time.now = 119.0
        assert cache.get("live:1000") == {}
        fake_time.now = 120.0
        assert cache.get("live:1000") is None
        assert cache.size() == 0

    def test_per_entry_ttl(self, fake_time):
        """An explicit TTL overrides the default."""
        cache = InMemoryCache(default_ttl_seconds=120, clock=fake_time)
        cache.set("short", 1, ttl=10)
        fake_time.now = 11.0
        assert cache.get("short") is None

    def test_fifo_eviction(self):
        """The oldest entry goes when the cache is full."""
        cache = InMemoryCache(max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)
        assert cache.get("a") is None
        assert cache.get("c") == 3

    def test_get_or_compute(self):
        """The compute function only runs on a miss."""
        cache = InMemoryCache()
        calls = []

        def compute():
            calls.append(1)
            return {"152": 5}

        assert cache.get_or_compute("k", compute) == {"152": 5}
        assert cache.get_or_compute("k", compute) == {"152": 5}
        assert len(calls) == 1

    def test_compute_errors_propagate(self):
        """A failing compute function caches nothing."""
        cache = InMemoryCache()

        def fail():
            raise RuntimeError("supplier down")

        with pytest.raises(RuntimeError):
            cache.get_or_compute("k", fail)
        assert cache.size() == 0

    def test_stats_invalidate_clear(self):
        """Hit/miss counters and removal helpers."""
        cache = InMemoryCache()
        cache.set("a", 1)
        cache.get("a")
        cache.get("b")
        assert cache.stats() == {"size": 1, "hits": 1, "misses": 1, "hit_rate_percent": 50.0}

        assert cache.invalidate("a")
        assert not cache.invalidate("a")
        cache.set("b", 2)
        assert cache.clear() == 1
        assert cache.stats()["hits"] == 0


def test_null_cache_always_misses():
    """NullCache stores nothing."""
    cache = NullCache()
    cache.set("a", 1)
    assert cache.get("a") is None
    assert cache.get_or_compute("a", lambda: 2) == 2
    assert cache.size() == 0
    assert cache.clear() == 0
