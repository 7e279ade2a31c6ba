"""Search Result Cache - short-lived cache for aggregated search results.

Hey future me - the same query tends to arrive in bursts (typeahead, retries,
several clients on one trending song). Each aggregate search costs three
upstream calls and, for Spotify, counts against the rate limit. SearchCache
remembers the merged result for a short while:

- TTL-based expiration (default: 60 seconds - catalogs change, keep it short)
- Query normalization (lowercase, collapse whitespace)
- Key includes the SORTED platform set, so "youtube only" never answers "all"
- Memory-bounded (max entries, LRU eviction)
- Hit/miss stats for monitoring

The aggregator only stores results where every selected provider answered.
A partial result is never cached - otherwise one blip would hide a platform
for the whole TTL.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import time
from collections import OrderedDict
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from tunescout.domain.entities import Platform, Song

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass
class CacheEntry:
    """Single cache entry with metadata."""

    query: str
    songs: tuple[Song, ...]
    created_at: float
    hit_count: int = field(default=0)

    def touch(self) -> None:
        """Count a hit."""
        self.hit_count += 1


@dataclass
class CacheStats:
    """Statistics for the search cache."""

    total_queries: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    total_entries: int = 0
    total_songs_cached: int = 0
    oldest_entry_age_seconds: float = 0
    evictions: int = 0

    @property
    def hit_rate(self) -> float:
        """Cache hit rate as percentage."""
        if self.total_queries == 0:
            return 0.0
        return (self.cache_hits / self.total_queries) * 100


def normalize_query(query: str) -> str:
    """Lowercase and collapse whitespace: "  Daft   PUNK " → "daft punk"."""
    return " ".join(query.lower().split())


class SearchCache:
    """In-memory TTL + LRU cache for aggregated search results.

    Usage:
        cache = SearchCache(ttl_seconds=60, max_entries=256)

        songs = await cache.get(query, platforms)
        if songs is None:
            songs = ...  # fan out
            await cache.put(query, platforms, songs)
    """

    def __init__(
        self,
        ttl_seconds: float = 60,
        max_entries: int = 256,
        clock: Clock = time.monotonic,
    ) -> None:
        """Initialize the search cache.

        Args:
            ttl_seconds: Entry TTL in seconds (default: 60)
            max_entries: Maximum number of cached searches (default: 256)
            clock: Monotonic seconds source (injectable for tests)
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._cache: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = asyncio.Lock()
        self._stats = CacheStats()

    @staticmethod
    def make_key(query: str, platforms: Iterable[Platform]) -> str:
        """Build the cache key from the normalized query and the platform set."""
        platform_part = ",".join(sorted({Platform(p).value for p in platforms}))
        key_input = f"{normalize_query(query)}|{platform_part}"
        return hashlib.sha256(key_input.encode()).hexdigest()[:16]

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.created_at >= self._ttl

    async def get(
        self, query: str, platforms: Iterable[Platform]
    ) -> list[Song] | None:
        """Get cached songs, or None when missing or expired."""
        key = self.make_key(query, platforms)

        async with self._lock:
            self._stats.total_queries += 1

            entry = self._cache.get(key)
            if entry is None:
                self._stats.cache_misses += 1
                logger.debug("Cache MISS for query: %.50s", query)
                return None

            if self._is_expired(entry, self._clock()):
                del self._cache[key]
                self._stats.cache_misses += 1
                logger.debug("Cache EXPIRED for query: %.50s", query)
                return None

            entry.touch()
            self._cache.move_to_end(key)
            self._stats.cache_hits += 1
            logger.debug("Cache HIT for query: %.50s (%d songs)", query, len(entry.songs))
            return list(entry.songs)

    async def put(
        self, query: str, platforms: Iterable[Platform], songs: Iterable[Song]
    ) -> None:
        """Store songs for the query/platform combination, evicting LRU entries."""
        key = self.make_key(query, platforms)
        stored = tuple(songs)

        async with self._lock:
            self._cache.pop(key, None)
            while len(self._cache) >= self._max_entries:
                self._cache.popitem(last=False)
                self._stats.evictions += 1

            self._cache[key] = CacheEntry(
                query=query, songs=stored, created_at=self._clock()
            )
            logger.debug(
                "Cached %d songs for query: %.50s (cache size: %d)",
                len(stored),
                query,
                len(self._cache),
            )

    async def invalidate(self, query: str, platforms: Iterable[Platform]) -> bool:
        """Drop one entry. Returns True if it existed."""
        key = self.make_key(query, platforms)
        async with self._lock:
            return self._cache.pop(key, None) is not None

    async def clear(self) -> int:
        """Clear all entries. Returns how many were dropped."""
        async with self._lock:
            count = len(self._cache)
            self._cache.clear()
        logger.info("Cleared %d search cache entries", count)
        return count

    async def cleanup_expired(self) -> int:
        """Remove all expired entries. Returns how many were removed."""
        now = self._clock()
        async with self._lock:
            expired = [k for k, e in self._cache.items() if self._is_expired(e, now)]
            for key in expired:
                del self._cache[key]

        if expired:
            logger.info("Cleaned up %d expired search cache entries", len(expired))
        return len(expired)

    def get_stats(self) -> CacheStats:
        """Snapshot of the cache statistics."""
        stats = CacheStats(
            total_queries=self._stats.total_queries,
            cache_hits=self._stats.cache_hits,
            cache_misses=self._stats.cache_misses,
            total_entries=len(self._cache),
            evictions=self._stats.evictions,
        )
        if self._cache:
            stats.total_songs_cached = sum(len(e.songs) for e in self._cache.values())
            oldest = min(e.created_at for e in self._cache.values())
            stats.oldest_entry_age_seconds = self._clock() - oldest
        return stats

    def __len__(self) -> int:
        return len(self._cache)
