#!/usr/bin/env python3
"""
Size-bounded Byte Cache

Keeps raw feed content and expensive generated responses in memory as bytes.
Payloads larger than 50KB are gzip-compressed. Entries expire by TTL and are
evicted oldest-first when the configured capacity would be exceeded.
"""

import gzip
import hashlib
import logging
import threading
import time
import zlib
from typing import Any, Callable, Dict, Optional, Set, Union
from dataclasses import dataclass

from .exceptions import CacheCorruptionError

logger = logging.getLogger(__name__)

COMPRESSION_THRESHOLD_BYTES = 50 * 1024
BYTES_PER_MB = 1024 * 1024

RSS_CACHE_TTL_MINUTES = 30
AI_CACHE_TTL_MINUTES = 60

Payload = Union[str, bytes]


@dataclass(frozen=True)
class CachedContent:
    """Stored payload bytes. encoding is None for raw bytes payloads."""
    data: bytes
    encoding: Optional[str]
    compressed: bool
    size: int


@dataclass(frozen=True)
class CacheEntry:
    """A single cache entry with metadata."""
    key: str
    content: CachedContent
    timestamp: float
    ttl_seconds: float

    def is_expired(self, now: float) -> bool:
        """Check if this entry has expired."""
        return now - self.timestamp > self.ttl_seconds


def optimize_for_cache(payload: Payload) -> CachedContent:
    """Encode a payload to bytes, compressing anything above 50KB."""
    if isinstance(payload, bytes):
        data, encoding = payload, None
    else:
        data, encoding = payload.encode('utf-8'), 'utf-8'

    if len(data) > COMPRESSION_THRESHOLD_BYTES:
        compressed = gzip.compress(data)
        return CachedContent(data=compressed, encoding=encoding, compressed=True, size=len(compressed))

    return CachedContent(data=data, encoding=encoding, compressed=False, size=len(data))


def restore_from_cache(key: str, content: CachedContent) -> Payload:
    """
    Restore the original payload from stored content.

    Raises:
        CacheCorruptionError: If the stored bytes cannot be decompressed or decoded
    """
    try:
        data = gzip.decompress(content.data) if content.compressed else content.data
        if content.encoding is None:
            return data
        return data.decode(content.encoding)
    except (OSError, EOFError, zlib.error, UnicodeDecodeError) as e:
        raise CacheCorruptionError(key, e) from e


def create_content_hash(content: str) -> str:
    """Short stable hash used to build cache keys."""
    return hashlib.md5(content.encode('utf-8')).hexdigest()[:16]


class ByteCache:
    """
    Thread-safe byte cache with TTL expiry and capacity eviction.

    Features:
    - TTL expiration checked on read
    - Transparent gzip compression for large payloads
    - Oldest-first eviction to stay within capacity
    - Size and hit/miss statistics

    Capacity is a soft cap by default: eviction happens before insertion, so
    a single entry larger than the whole capacity is still stored (alone).
    With strict_capacity=True such entries are rejected instead.
    """

    def __init__(self,
                 max_size_mb: float = 50,
                 strict_capacity: bool = False,
                 time_fn: Callable[[], float] = time.time):
        """
        Initialize byte cache.

        Args:
            max_size_mb: Capacity in megabytes
            strict_capacity: Reject entries that can never fit
            time_fn: Clock returning seconds since the epoch
        """
        self.max_size = int(max_size_mb * BYTES_PER_MB)
        self.strict_capacity = strict_capacity
        self._time = time_fn

        self._cache: Dict[str, CacheEntry] = {}
        self._current_size = 0
        self._lock = threading.RLock()

        # Statistics
        self._stats = {
            'hits': 0,
            'misses': 0,
            'sets': 0,
            'evictions': 0,
            'rejected': 0
        }

        logger.debug(f"Initialized byte cache with capacity={max_size_mb}MB, strict={strict_capacity}")

    @property
    def current_size(self) -> int:
        """Resident size in bytes."""
        with self._lock:
            return self._current_size

    def set(self, key: str, payload: Payload, ttl_minutes: float = 60) -> bool:
        """
        Store a payload.

        Args:
            key: Cache key
            payload: Text or bytes to cache
            ttl_minutes: Time-to-live in minutes

        Returns:
            True if stored, False if rejected by strict capacity
        """
        content = optimize_for_cache(payload)

        with self._lock:
            # A rejected write leaves any existing value for the key in place
            if self.strict_capacity and content.size > self.max_size:
                self._stats['rejected'] += 1
                logger.warning(f"Rejected cache entry {key}: {content.size} bytes exceeds capacity {self.max_size}")
                return False

            if key in self._cache:
                self._remove(key)

            self._evict_if_needed(content.size)

            self._cache[key] = CacheEntry(
                key=key,
                content=content,
                timestamp=self._time(),
                ttl_seconds=ttl_minutes * 60
            )
            self._current_size += content.size
            self._stats['sets'] += 1

            logger.debug(f"Cached key: {key} ({content.size} bytes, compressed={content.compressed}, TTL: {ttl_minutes}m)")
            return True

    def get(self, key: str) -> Optional[Payload]:
        """
        Get payload from cache.

        Returns:
            Original payload, or None if missing or expired

        Raises:
            CacheCorruptionError: If the stored bytes are damaged
        """
        with self._lock:
            entry = self._cache.get(key)

            if entry is None:
                self._stats['misses'] += 1
                return None

            if entry.is_expired(self._time()):
                self._remove(key)
                self._stats['misses'] += 1
                logger.debug(f"Cache key expired: {key}")
                return None

            self._stats['hits'] += 1
            content = entry.content

        return restore_from_cache(key, content)

    def has(self, key: str) -> bool:
        """Check if key exists and is not expired."""
        with self._lock:
            entry = self._cache.get(key)
            return entry is not None and not entry.is_expired(self._time())

    def delete(self, key: str) -> bool:
        """
        Delete key from cache.

        Returns:
            True if key was deleted, False if not found
        """
        with self._lock:
            if key in self._cache:
                self._remove(key)
                logger.debug(f"Deleted cache key: {key}")
                return True
            return False

    def clear(self) -> None:
        """Clear all entries from cache."""
        with self._lock:
            count = len(self._cache)
            self._cache.clear()
            self._current_size = 0
            logger.debug(f"Cleared {count} cache entries")

    def keys(self) -> Set[str]:
        """Get all cache keys, expired or not."""
        with self._lock:
            return set(self._cache.keys())

    def entry_info(self, key: str) -> Optional[Dict[str, Any]]:
        """Get detailed information about a cache entry."""
        with self._lock:
            entry = self._cache.get(key)
            if not entry:
                return None

            now = self._time()
            return {
                'key': entry.key,
                'size': entry.content.size,
                'compressed': entry.content.compressed,
                'encoding': entry.content.encoding,
                'age_seconds': now - entry.timestamp,
                'ttl_seconds': entry.ttl_seconds,
                'is_expired': entry.is_expired(now)
            }

    def _remove(self, key: str) -> None:
        entry = self._cache.pop(key)
        self._current_size -= entry.content.size

    def _evict_if_needed(self, new_entry_size: int) -> None:
        """Evict oldest entries until the new entry fits or the cache is empty."""
        while self._cache and self._current_size + new_entry_size > self.max_size:
            # Ties keep insertion order, so the earliest inserted goes first
            oldest = min(self._cache.values(), key=lambda e: e.timestamp)
            self._remove(oldest.key)
            self._stats['evictions'] += 1
            logger.debug(f"Evicted cache key {oldest.key} ({oldest.content.size} bytes)")

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            total_requests = self._stats['hits'] + self._stats['misses']
            hit_rate = (self._stats['hits'] / total_requests * 100) if total_requests > 0 else 0

            return {
                'entries': len(self._cache),
                'size_mb': round(self._current_size / BYTES_PER_MB, 2),
                'max_size_mb': round(self.max_size / BYTES_PER_MB, 2),
                'hits': self._stats['hits'],
                'misses': self._stats['misses'],
                'hit_rate': hit_rate,
                'sets': self._stats['sets'],
                'evictions': self._stats['evictions'],
                'rejected': self._stats['rejected']
            }

    # Namespaced helpers for the two main consumers

    def cache_feed_content(self, feed_key: str, content: str) -> bool:
        """Cache raw or parsed feed content under rss:<feed_key>."""
        return self.set(f"rss:{feed_key}", content, RSS_CACHE_TTL_MINUTES)

    def get_feed_content(self, feed_key: str) -> Optional[Payload]:
        return self.get(f"rss:{feed_key}")

    def cache_generated_response(self, prompt_hash: str, response: str) -> bool:
        """Cache an expensive generated response under ai:<prompt_hash>."""
        return self.set(f"ai:{prompt_hash}", response, AI_CACHE_TTL_MINUTES)

    def get_generated_response(self, prompt_hash: str) -> Optional[Payload]:
        return self.get(f"ai:{prompt_hash}")
