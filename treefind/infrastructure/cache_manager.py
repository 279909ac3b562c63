#!/usr/bin/env python3
"""LRU cache with TTL support for treefind lookups.

This module provides the small cache used for identifier lookups:
- LRU eviction policy
- TTL-based expiration
- Entry-count limit
- Thread-safe operations
- Cache statistics

Example:
    >>> cache = LRUCache(CacheConfig(max_entries=128, ttl_seconds=60))
    >>> cache.set("uid:0", "root")
    >>> cache.get("uid:0")
    'root'
"""

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Optional

from treefind.core.constants import Limits


@dataclass
class CacheEntry:
    """Single cache entry with metadata."""

    key: Hashable
    value: Any
    timestamp: float = field(default_factory=time.time)
    access_count: int = 0

    def is_expired(self, ttl: float) -> bool:
        """Check if entry has expired.

        Args:
            ttl: Time-to-live in seconds

        Returns:
            True if expired
        """
        return time.time() - self.timestamp > ttl

    def touch(self) -> None:
        """Update access count."""
        self.access_count += 1


@dataclass
class CacheConfig:
    """Configuration for an LRU cache."""

    max_entries: int = Limits.OWNER_CACHE_ENTRIES
    ttl_seconds: float = Limits.OWNER_CACHE_TTL
    enabled: bool = True

    def validate(self) -> None:
        """Validate cache configuration."""
        if self.max_entries <= 0:
            raise ValueError(f"max_entries must be positive: {self.max_entries}")
        if self.ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive: {self.ttl_seconds}")


class LRUCache:
    """Thread-safe LRU cache with TTL and an entry limit."""

    def __init__(self, config: Optional[CacheConfig] = None):
        """Initialize LRU cache.

        Args:
            config: Cache configuration (defaults if None)
        """
        self.config = config or CacheConfig()
        self.config.validate()
        self._cache: "OrderedDict[Hashable, CacheEntry]" = OrderedDict()
        self._lock = threading.RLock()

        # Statistics
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Get value from cache.

        Args:
            key: Cache key
            default: Returned when the key is absent or expired

        Returns:
            Cached value or default
        """
        if not self.config.enabled:
            self._misses += 1
            return default

        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self._misses += 1
                return default

            if entry.is_expired(self.config.ttl_seconds):
                del self._cache[key]
                self._expirations += 1
                self._misses += 1
                return default

            # Move to end (most recently used)
            self._cache.move_to_end(key)
            entry.touch()

            self._hits += 1
            return entry.value

    def set(self, key: Hashable, value: Any) -> None:
        """Set value in cache.

        Args:
            key: Cache key
            value: Value to cache
        """
        if not self.config.enabled:
            return

        with self._lock:
            self._cache.pop(key, None)

            while len(self._cache) >= self.config.max_entries:
                # First item is LRU
                self._cache.popitem(last=False)
                self._evictions += 1

            self._cache[key] = CacheEntry(key=key, value=value)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            entry = self._cache.get(key)
            return entry is not None and not entry.is_expired(self.config.ttl_seconds)

    def invalidate(self, key: Hashable) -> bool:
        """Remove entry from cache.

        Returns:
            True if entry was removed
        """
        with self._lock:
            return self._cache.pop(key, None) is not None

    def clear(self) -> None:
        """Clear all cache entries."""
        with self._lock:
            self._cache.clear()

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics.

        Returns:
            Cache statistics
        """
        with self._lock:
            total_requests = self._hits + self._misses
            hit_rate = self._hits / total_requests if total_requests > 0 else 0

            return {
                "entries": len(self._cache),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": hit_rate,
                "evictions": self._evictions,
                "expirations": self._expirations,
            }

    def __len__(self) -> int:
        """Return number of entries."""
        return len(self._cache)
