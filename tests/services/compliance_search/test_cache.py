"""
Tests for the Result Cache
==========================

Version: 0.1.0
"""

from shared.models.search import SearchResponse
from services.compliance_search.cache import ResultCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_cache(ttl: float = 60.0, max_entries: int = 1000) -> tuple[ResultCache, FakeClock]:
    clock = FakeClock()
    return ResultCache(ttl_seconds=ttl, max_entries=max_entries, clock=clock), clock


# ============================================================================
# Get / Put
# ============================================================================


class TestResultCacheLookup:
    """Tests for get and put."""

    def test_miss_on_empty_cache(self) -> None:
        cache, _ = make_cache()

        assert cache.get("missing") is None
        assert cache.counters.misses == 1
        assert cache.counters.hits == 0

    def test_hit_returns_stored_response(self) -> None:
        cache, _ = make_cache()
        response = SearchResponse()
        cache.put("k", "restaurant licensing", response)

        entry = cache.get("k")

        assert entry is not None
        assert entry.response is response
        assert entry.query_text == "restaurant licensing"

    def test_hit_count_increments_per_hit(self) -> None:
        cache, _ = make_cache()
        cache.put("k", "q", SearchResponse())

        cache.get("k")
        entry = cache.get("k")

        assert entry is not None
        assert entry.hit_count == 2
        assert cache.counters.hits == 2

    def test_overwrite_resets_entry(self) -> None:
        cache, _ = make_cache()
        cache.put("k", "q", SearchResponse())
        cache.get("k")

        replacement = SearchResponse(response_time_ms=5.0)
        cache.put("k", "q", replacement)
        entry = cache.get("k")

        assert entry is not None
        assert entry.response is replacement
        assert entry.hit_count == 1
        assert len(cache) == 1


# ============================================================================
# Expiry
# ============================================================================


class TestResultCacheExpiry:
    """Tests for TTL handling."""

    def test_fresh_entry_served_before_ttl(self) -> None:
        cache, clock = make_cache(ttl=60)
        cache.put("k", "q", SearchResponse())

        clock.advance(59.9)

        assert cache.get("k") is not None

    def test_entry_expires_at_ttl(self) -> None:
        cache, clock = make_cache(ttl=60)
        cache.put("k", "q", SearchResponse())

        clock.advance(60)

        assert cache.get("k") is None
        assert "k" not in cache
        assert cache.counters.expirations == 1
        assert cache.counters.misses == 1

    def test_default_ttl_is_six_hours(self) -> None:
        cache = ResultCache()

        assert cache.ttl_seconds == 6 * 60 * 60
        assert cache.max_entries == 1000


# ============================================================================
# Capacity
# ============================================================================


class TestResultCacheCapacity:
    """Tests for oldest-first eviction."""

    def test_oldest_entry_evicted_past_capacity(self) -> None:
        cache, _ = make_cache(max_entries=2)

        cache.put("a", "a", SearchResponse())
        cache.put("b", "b", SearchResponse())
        cache.put("c", "c", SearchResponse())

        assert len(cache) == 2
        assert "a" not in cache
        assert "b" in cache
        assert "c" in cache
        assert cache.counters.evictions == 1

    def test_overwrite_moves_key_to_newest(self) -> None:
        cache, _ = make_cache(max_entries=2)

        cache.put("a", "a", SearchResponse())
        cache.put("b", "b", SearchResponse())
        cache.put("a", "a", SearchResponse())
        cache.put("c", "c", SearchResponse())

        assert "a" in cache
        assert "b" not in cache

    def test_reads_do_not_change_eviction_order(self) -> None:
        cache, _ = make_cache(max_entries=2)

        cache.put("a", "a", SearchResponse())
        cache.put("b", "b", SearchResponse())
        cache.get("a")
        cache.put("c", "c", SearchResponse())

        assert "a" not in cache


# ============================================================================
# Stats
# ============================================================================


class TestResultCacheStats:
    """Tests for cache statistics."""

    def test_empty_stats(self) -> None:
        cache, _ = make_cache()

        stats = cache.stats()

        assert stats.total_cached == 0
        assert stats.popular_terms == []
        assert stats.cache_hit_rate == 0

    def test_hit_rate_is_integer_percent(self) -> None:
        cache, _ = make_cache()
        cache.put("k", "q", SearchResponse())

        cache.get("k")
        cache.get("k")
        cache.get("missing")

        assert cache.stats().cache_hit_rate == 67

    def test_popular_terms_ordered_by_hits(self) -> None:
        cache, _ = make_cache()
        cache.put("a", "food service permits", SearchResponse())
        cache.put("b", "restaurant licensing", SearchResponse())
        for _ in range(3):
            cache.get("b")
        cache.get("a")

        popular = cache.stats().popular_terms

        assert [(p.query, p.hits) for p in popular] == [
            ("restaurant licensing", 3),
            ("food service permits", 1),
        ]

    def test_popular_terms_capped_at_ten(self) -> None:
        cache, _ = make_cache()
        for i in range(15):
            cache.put(str(i), f"query {i}", SearchResponse())

        assert len(cache.stats().popular_terms) == 10

    def test_expired_entries_left_out_before_access(self) -> None:
        cache, clock = make_cache(ttl=60.0)
        cache.put("old", "construction permits", SearchResponse())
        cache.get("old")
        clock.advance(30)
        cache.put("new", "restaurant licensing", SearchResponse())
        clock.advance(30)

        stats = cache.stats()

        assert stats.total_cached == 1
        assert [p.query for p in stats.popular_terms] == ["restaurant licensing"]
        assert "old" in cache

    def test_clear(self) -> None:
        cache, _ = make_cache()
        cache.put("k", "q", SearchResponse())
        cache.get("k")

        cache.clear()

        assert len(cache) == 0
        assert cache.stats().hits == 0
