"""
Template Cache

Thread-safe in-memory cache for catalog templates with per-entry TTL and
least-recently-accessed eviction.
"""

import os
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from dotenv import load_dotenv

from vellum.contexts.templating.logger import _log_debug

load_dotenv()
DEFAULT_TTL_SECONDS = float(os.getenv("VELLUM_CACHE_TTL_SECONDS", 30 * 60))
DEFAULT_MAX_SIZE = int(os.getenv("VELLUM_CACHE_MAX_SIZE", 100))


@dataclass
class CacheEntry:
    """
    A cached value with access bookkeeping.

    Attributes:
        value: The cached template
        timestamp: Clock reading when the entry was stored
        access_count: Number of successful gets
        last_accessed: Clock reading of the most recent store or hit
    """

    value: Any
    timestamp: float
    access_count: int = 0
    last_accessed: float = 0.0


@dataclass
class CacheStats:
    """Point-in-time cache statistics."""

    hits: int
    misses: int
    hit_rate: float
    size: int
    max_size: int


class TemplateCache:
    """
    TTL + LRU cache keyed by template id.

    Expired entries are treated as absent and removed lazily on lookup, or in
    bulk by cleanup(). Inserting a new key at capacity evicts the entry with
    the oldest last_accessed; overwriting an existing key never evicts.

    Every public method holds the same lock, so stats are consistent snapshots.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_size: int = DEFAULT_MAX_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            ttl_seconds: Entry lifetime (default 30 minutes)
            max_size: Maximum number of entries (default 100)
            clock: Monotonic time source, injectable for tests
        """
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")

        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.timestamp > self.ttl_seconds

    def _evict_lru(self) -> None:
        oldest_key = min(self._entries, key=lambda k: self._entries[k].last_accessed)
        del self._entries[oldest_key]
        _log_debug(f"cache evicted {oldest_key}")

    def get(self, key: str) -> Optional[Any]:
        """
        Return the cached value, or None if absent or expired.

        A hit bumps the entry's access_count and last_accessed.
        """
        with self._lock:
            now = self._clock()
            entry = self._entries.get(key)

            if entry is None:
                self._misses += 1
                return None

            if self._is_expired(entry, now):
                del self._entries[key]
                self._misses += 1
                _log_debug(f"cache entry expired: {key}")
                return None

            entry.access_count += 1
            entry.last_accessed = now
            self._hits += 1
            return entry.value

    def set(self, key: str, value: Any) -> None:
        """Store a value, evicting the least recently accessed entry if full."""
        with self._lock:
            now = self._clock()
            if key not in self._entries and len(self._entries) >= self.max_size:
                self._evict_lru()
            self._entries[key] = CacheEntry(value=value, timestamp=now, last_accessed=now)

    def has(self, key: str) -> bool:
        """True if a non-expired entry exists. Does not touch hit/miss counters."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            if self._is_expired(entry, self._clock()):
                del self._entries[key]
                return False
            return True

    def delete(self, key: str) -> bool:
        """Remove an entry. Returns True if it existed."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Remove all entries and reset hit/miss counters."""
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def cleanup(self) -> int:
        """
        Purge every expired entry.

        Returns:
            Number of entries removed
        """
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if self._is_expired(e, now)]
            for key in expired:
                del self._entries[key]

        if expired:
            _log_debug(f"cache cleanup removed {len(expired)} expired entries")
        return len(expired)

    def size(self) -> int:
        """Number of stored entries (expired ones included until purged)."""
        with self._lock:
            return len(self._entries)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def get_stats(self) -> CacheStats:
        with self._lock:
            lookups = self._hits + self._misses
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                hit_rate=self._hits / lookups if lookups else 0.0,
                size=len(self._entries),
                max_size=self.max_size,
            )

    def get_detailed_stats(self) -> Dict[str, Dict[str, float]]:
        """
        Per-entry bookkeeping for diagnostics.

        Returns:
            Dict mapping key -> {"age_s", "access_count", "idle_s"}
        """
        with self._lock:
            now = self._clock()
            return {
                key: {
                    "age_s": now - entry.timestamp,
                    "access_count": entry.access_count,
                    "idle_s": now - entry.last_accessed,
                }
                for key, entry in self._entries.items()
            }
