"""
PropertyCache - in-memory TTL cache for block and apartment lookups.

Owned by the service registry (one instance per app) and injected into
the services that read property data. Writers call invalidate() after
changing blocks or apartments; imports call clear() on refresh.
"""

from typing import Any, Callable, Dict, Optional
import time
import threading

from logging_config import get_logger

logger = get_logger(__name__)


class CacheEntry:
    """A cached value with its expiration."""

    def __init__(self, value: Any, ttl: Optional[float] = None):
        self.value = value
        self.created_at = time.monotonic()
        self.ttl = ttl

    def is_expired(self) -> bool:
        if self.ttl is None:
            return False
        return time.monotonic() - self.created_at >= self.ttl


class PropertyCache:
    """
    Thread-safe TTL cache keyed by strings such as ``blocks:all`` or
    ``apartments:<block_id>``.
    """

    def __init__(self, default_ttl: Optional[float] = 300):
        self.default_ttl = default_ttl
        self._cache: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._cache.get(key)
            if entry is not None:
                if not entry.is_expired():
                    self._hits += 1
                    return entry.value
                del self._cache[key]
            self._misses += 1
            return None

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        with self._lock:
            self._cache[key] = CacheEntry(value, self.default_ttl if ttl is None else ttl)

    def get_or_set(self, key: str, factory_func: Callable[[], Any], ttl: Optional[float] = None) -> Any:
        """
        Get value from cache or compute and cache it.

        Args:
            key: Cache key
            factory_func: Function to compute value if not cached
            ttl: Time to live in seconds (defaults to the cache TTL)
        """
        value = self.get(key)
        if value is None:
            value = factory_func()
            self.set(key, value, ttl)
        return value

    def invalidate(self, prefix: Optional[str] = None) -> int:
        """
        Drop entries whose key starts with ``prefix`` (all entries when omitted).

        Returns:
            Number of entries removed
        """
        with self._lock:
            if prefix is None:
                removed = len(self._cache)
                self._cache.clear()
            else:
                keys = [key for key in self._cache if key.startswith(prefix)]
                for key in keys:
                    del self._cache[key]
                removed = len(keys)
        if removed:
            logger.debug("Property cache invalidated", prefix=prefix, removed=removed)
        return removed

    def clear(self) -> None:
        """Drop every entry and reset statistics."""
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0
        logger.info("Property cache cleared")

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            total_requests = self._hits + self._misses
            return {
                'total_keys': len(self._cache),
                'hits': self._hits,
                'misses': self._misses,
                'hit_rate': self._hits / total_requests if total_requests > 0 else 0.0,
            }
