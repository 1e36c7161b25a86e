"""Unit tests for TemplateCache."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from vellum.contexts.templating.template_cache import TemplateCache


@pytest.mark.unit
def test_get_missing_key_counts_miss(clock):
    """Test that looking up an absent key returns None and counts a miss."""
    cache = TemplateCache(ttl_seconds=60, max_size=5, clock=clock)

    assert cache.get("nope") is None
    stats = cache.get_stats()
    assert stats.misses == 1
    assert stats.hits == 0
    assert stats.hit_rate == 0.0


@pytest.mark.unit
def test_set_then_get_counts_hit(clock):
    """Test that a stored value is returned and counted as a hit."""
    cache = TemplateCache(ttl_seconds=60, max_size=5, clock=clock)
    cache.set("a", {"id": "a"})

    assert cache.get("a") == {"id": "a"}
    assert cache.get("b") is None

    stats = cache.get_stats()
    assert stats.hits == 1
    assert stats.misses == 1
    assert stats.hit_rate == 0.5
    assert stats.size == 1
    assert stats.max_size == 5


@pytest.mark.unit
def test_entry_expires_after_ttl(clock):
    """Test that entries older than the TTL are dropped on lookup."""
    cache = TemplateCache(ttl_seconds=60, max_size=5, clock=clock)
    cache.set("a", 1)

    clock.advance(60)
    assert cache.get("a") == 1

    clock.advance(1)
    assert cache.get("a") is None
    assert cache.size() == 0
    assert cache.get_stats().misses == 1


@pytest.mark.unit
def test_lru_eviction_at_capacity(clock):
    """Test that inserting at capacity evicts the least recently accessed entry."""
    cache = TemplateCache(ttl_seconds=600, max_size=2, clock=clock)
    cache.set("a", 1)
    clock.advance(1)
    cache.set("b", 2)
    clock.advance(1)
    cache.get("a")
    clock.advance(1)

    cache.set("c", 3)

    assert sorted(cache.keys()) == ["a", "c"]
    assert cache.size() == 2


@pytest.mark.unit
def test_overwrite_at_capacity_does_not_evict(clock):
    """Test that replacing an existing key never evicts another entry."""
    cache = TemplateCache(ttl_seconds=600, max_size=2, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)

    cache.set("a", 10)

    assert sorted(cache.keys()) == ["a", "b"]
    assert cache.get("a") == 10


@pytest.mark.unit
def test_has_does_not_touch_counters(clock):
    """Test that has() reports presence without counting hits or misses."""
    cache = TemplateCache(ttl_seconds=60, max_size=5, clock=clock)
    cache.set("a", 1)

    assert cache.has("a")
    assert not cache.has("b")

    stats = cache.get_stats()
    assert stats.hits == 0
    assert stats.misses == 0


@pytest.mark.unit
def test_delete_and_clear(clock):
    """Test deleting single entries and clearing the whole cache."""
    cache = TemplateCache(ttl_seconds=60, max_size=5, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.get("a")
    cache.get("zzz")

    assert cache.delete("a") is True
    assert cache.delete("a") is False

    cache.clear()
    stats = cache.get_stats()
    assert stats.size == 0
    assert stats.hits == 0
    assert stats.misses == 0


@pytest.mark.unit
def test_cleanup_removes_only_expired(clock):
    """Test that cleanup() purges expired entries and reports how many."""
    cache = TemplateCache(ttl_seconds=10, max_size=5, clock=clock)
    cache.set("old", 1)
    clock.advance(8)
    cache.set("new", 2)
    clock.advance(5)

    assert cache.cleanup() == 1
    assert cache.keys() == ["new"]


@pytest.mark.unit
def test_detailed_stats(clock):
    """Test per-entry age, idle time and access count."""
    cache = TemplateCache(ttl_seconds=60, max_size=5, clock=clock)
    cache.set("a", 1)
    clock.advance(5)
    cache.get("a")
    cache.get("a")
    clock.advance(3)

    details = cache.get_detailed_stats()["a"]
    assert details["age_s"] == 8
    assert details["idle_s"] == 3
    assert details["access_count"] == 2


@pytest.mark.unit
def test_invalid_max_size():
    """Test that a cache must hold at least one entry."""
    with pytest.raises(ValueError):
        TemplateCache(max_size=0)


@pytest.mark.unit
def test_concurrent_access_keeps_bounds_and_counters():
    """Test that parallel gets and sets never overfill the cache or lose lookups."""
    cache = TemplateCache(ttl_seconds=60, max_size=10)
    workers, rounds = 8, 500

    def hammer(worker):
        for i in range(rounds):
            key = f"template-{(worker * 7 + i) % 25}"
            if i % 3 == 0:
                cache.set(key, {"id": key})
            else:
                cache.get(key)
            assert cache.size() <= 10

    with ThreadPoolExecutor(max_workers=workers) as pool:
        list(pool.map(hammer, range(workers)))

    gets_per_worker = sum(1 for i in range(rounds) if i % 3 != 0)
    stats = cache.get_stats()
    assert stats.hits + stats.misses == workers * gets_per_worker
    assert stats.hit_rate == pytest.approx(stats.hits / (workers * gets_per_worker))
    assert stats.size <= 10
    assert stats.size == len(cache.keys())
