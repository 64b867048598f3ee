"""
Result Cache
============

In-process TTL cache of search responses keyed by query cache key.

Entries expire after the TTL (checked on access) and the oldest entry is
evicted once the cache grows past its capacity. Owned by a single
orchestrator and only touched from the event loop.

Version: 0.1.0
"""

import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, field

from shared.logging import get_logger
from shared.models.search import CacheStatsResponse, PopularTerm, SearchResponse

logger = get_logger(__name__)


DEFAULT_TTL_SECONDS = 6 * 60 * 60
DEFAULT_MAX_ENTRIES = 1000
POPULAR_TERMS_LIMIT = 10


@dataclass
class CacheEntry:
    """A cached response and its bookkeeping."""

    query_text: str
    response: SearchResponse
    created_at: float
    hit_count: int = 0


@dataclass
class CacheCounters:
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0

    @property
    def hit_rate(self) -> int:
        """Integer percentage of lookups served from cache."""
        lookups = self.hits + self.misses
        return round(self.hits * 100 / lookups) if lookups else 0


@dataclass
class ResultCache:
    """Insertion-ordered TTL cache with a global entry cap."""

    ttl_seconds: float = DEFAULT_TTL_SECONDS
    max_entries: int = DEFAULT_MAX_ENTRIES
    clock: Callable[[], float] = time.monotonic

    _entries: OrderedDict[str, CacheEntry] = field(default_factory=OrderedDict, init=False)
    counters: CacheCounters = field(default_factory=CacheCounters, init=False)

    def get(self, key: str) -> CacheEntry | None:
        """Return a fresh entry and count the hit, or None (removing a stale entry)."""
        entry = self._entries.get(key)

        if entry is not None and not self._is_fresh(entry, self.clock()):
            del self._entries[key]
            self.counters.expirations += 1
            logger.debug("cache_entry_expired", cache_key=key, query=entry.query_text)
            entry = None

        if entry is None:
            self.counters.misses += 1
            return None

        entry.hit_count += 1
        self.counters.hits += 1
        return entry

    def put(self, key: str, query_text: str, response: SearchResponse) -> None:
        """Insert or overwrite an entry, evicting the oldest past capacity."""
        if key in self._entries:
            del self._entries[key]

        self._entries[key] = CacheEntry(
            query_text=query_text,
            response=response,
            created_at=self.clock(),
        )

        while len(self._entries) > self.max_entries:
            evicted_key, evicted = self._entries.popitem(last=False)
            self.counters.evictions += 1
            logger.debug("cache_entry_evicted", cache_key=evicted_key, query=evicted.query_text)

    def _is_fresh(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.created_at < self.ttl_seconds

    def stats(self) -> CacheStatsResponse:
        """Counters plus the fresh entries; expired entries not yet read are left out."""
        now = self.clock()
        fresh = [entry for entry in self._entries.values() if self._is_fresh(entry, now)]
        popular = sorted(fresh, key=lambda e: e.hit_count, reverse=True)

        return CacheStatsResponse(
            total_cached=len(fresh),
            popular_terms=[
                PopularTerm(query=entry.query_text, hits=entry.hit_count)
                for entry in popular[:POPULAR_TERMS_LIMIT]
            ],
            cache_hit_rate=self.counters.hit_rate,
            hits=self.counters.hits,
            misses=self.counters.misses,
        )

    def clear(self) -> None:
        self._entries.clear()
        self.counters = CacheCounters()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
