# tests/test_cache.py

from __future__ import annotations

import pytest

from memtask.core.cache import BoundedCache, CacheConfig, CacheStats
from memtask.core.errors import ConfigError

from .fakes import FakeClock


def _cache(max_size: int = 3, ttl: float = 60.0) -> tuple[BoundedCache[str, int], FakeClock]:
    clock = FakeClock()
    return BoundedCache(CacheConfig(max_size=max_size, ttl_seconds=ttl), clock=clock), clock


def test_rejects_non_positive_max_size() -> None:
    with pytest.raises(ConfigError):
        BoundedCache(CacheConfig(max_size=0, ttl_seconds=1.0))
    with pytest.raises(ConfigError):
        BoundedCache(CacheConfig(max_size=-3, ttl_seconds=1.0))


def test_rejects_negative_ttl() -> None:
    with pytest.raises(ConfigError):
        BoundedCache(CacheConfig(max_size=1, ttl_seconds=-0.5))


def test_size_never_exceeds_max_size() -> None:
    cache, _ = _cache(max_size=5)
    for i in range(50):
        cache.set(f"k{i}", i)
        assert cache.size() <= 5
    assert len(cache) == 5


def test_lru_eviction_respects_get_recency() -> None:
    cache, _ = _cache(max_size=2)
    cache.set("a", 1)
    cache.set("b", 2)
    assert cache.get("a") == 1
    cache.set("c", 3)

    assert cache.get("b") is None
    assert cache.get("a") == 1
    assert cache.get("c") == 3


def test_set_existing_key_replaces_and_refreshes_recency() -> None:
    cache, _ = _cache(max_size=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("a", 10)
    cache.set("c", 3)

    assert cache.size() == 2
    assert cache.get("a") == 10
    assert cache.get("b") is None


def test_expired_entry_is_a_miss_and_is_evicted() -> None:
    cache, clock = _cache(ttl=10.0)
    cache.set("k", 1)

    clock.advance(10.5)
    assert cache.size() == 1  # lazily expired: still counted until accessed
    assert cache.get("k") is None
    assert cache.size() == 0
    assert cache.get_stats() == CacheStats(hits=0, misses=1)


def test_entry_at_exact_ttl_is_still_live() -> None:
    cache, clock = _cache(ttl=10.0)
    cache.set("k", 1)
    clock.advance(10.0)
    assert cache.get("k") == 1


def test_reinsert_resets_age() -> None:
    cache, clock = _cache(ttl=10.0)
    cache.set("k", 1)
    clock.advance(8)
    cache.set("k", 2)
    clock.advance(8)
    assert cache.get("k") == 2


def test_full_cache_evicts_lru_even_if_expired_entries_exist_elsewhere() -> None:
    cache, clock = _cache(max_size=2, ttl=5.0)
    cache.set("old", 1)
    clock.advance(1)
    cache.set("fresh", 2)
    clock.advance(10)  # both expired now, nothing evicted yet
    cache.set("new", 3)

    assert cache.size() == 2
    assert cache.delete("old") is False
    assert cache.delete("fresh") is True


def test_has_applies_expiry_and_counts_like_get() -> None:
    cache, clock = _cache(ttl=5.0)
    cache.set("k", 1)

    assert cache.has("k") is True
    assert cache.has("missing") is False
    clock.advance(6)
    assert cache.has("k") is False
    assert cache.size() == 0
    assert cache.get_stats() == CacheStats(hits=1, misses=2)


def test_stats_conservation_over_mixed_accesses() -> None:
    cache, clock = _cache(max_size=3, ttl=5.0)
    calls = 0
    for i in range(20):
        cache.set(f"k{i % 4}", i)
        if i % 3 == 0:
            clock.advance(2)
        cache.get(f"k{i % 5}")
        cache.has(f"k{(i + 1) % 6}")
        calls += 2

    stats = cache.get_stats()
    assert stats.hits + stats.misses == calls


def test_delete_and_clear_do_not_touch_stats() -> None:
    cache, _ = _cache()
    cache.set("a", 1)
    cache.get("a")
    cache.get("zzz")

    assert cache.delete("a") is True
    assert cache.delete("a") is False
    cache.set("b", 2)
    cache.clear()

    assert cache.size() == 0
    assert cache.get_stats() == CacheStats(hits=1, misses=1)


def test_get_stats_returns_snapshot() -> None:
    cache, _ = _cache()
    before = cache.get_stats()
    cache.get("nothing")
    assert before == CacheStats(hits=0, misses=0)
    assert cache.get_stats().misses == 1


def test_info_reports_config_and_counters() -> None:
    cache, _ = _cache(max_size=7, ttl=30.0)
    cache.set("a", 1)
    cache.get("a")
    info = cache.info()
    assert info["size"] == 1
    assert info["max_size"] == 7
    assert info["ttl_seconds"] == 30.0
    assert info["hits"] == 1
    assert info["misses"] == 0


def test_cache_config_from_millis() -> None:
    assert CacheConfig.from_millis(10, 1500) == CacheConfig(max_size=10, ttl_seconds=1.5)
