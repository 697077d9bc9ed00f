"""Expiring key -> value cache for read results.

Entries carry their own TTL and are evicted lazily on lookup or in bulk by
``sweep``. Invalidation is by substring pattern: a write drops
every cached read whose key mentions an operation name.
"""

import json
import logging
import threading
import time
from collections.abc import Callable
from typing import Any

from rsvp_gateway.config import settings
from rsvp_gateway.entities import CacheEntryEntity
from rsvp_gateway.protocols import CacheStore
from rsvp_gateway.repositories import InMemoryCacheStore

logger = logging.getLogger(__name__)


def build_cache_key(endpoint: str, operation: str, *params: Any) -> str:
    """Derive the cache key for one read.

    Dict parameters are serialized with sorted keys, so two logically
    identical requests map to the same key whatever order their filters
    were built in.

    Args:
        endpoint: Resource endpoint (e.g. "/rsvps")
        operation: Operation name (e.g. "fetch_all")
        *params: Operation parameters, JSON-serializable

    Returns:
        Key of the form ``{endpoint}:{operation}:{json params}``
    """
    serialized = json.dumps(list(params), sort_keys=True, separators=(",", ":"), default=str)
    return f"{endpoint}:{operation}:{serialized}"


class ExpiringCache:
    """Thread-safe TTL cache over a CacheStore.

    Example:
        ```python
        cache = ExpiringCache(default_ttl=120)
        cache.set("rsvps:fetch_all:[null]", items)
        cache.get("rsvps:fetch_all:[null]")  # items, until 120s have passed
        cache.invalidate("fetch_all")       # drop every fetch_all variant
        ```
    """

    def __init__(
        self,
        store: CacheStore | None = None,
        default_ttl: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the cache.

        Args:
            store: Entry storage. Defaults to a fresh InMemoryCacheStore.
            default_ttl: TTL in seconds for set() calls without one. Defaults to settings.
            clock: Returns the current time in seconds.
        """
        self._store = store if store is not None else InMemoryCacheStore()
        self._default_ttl = settings.cache_ttl if default_ttl is None else default_ttl
        self._clock = clock
        self._lock = threading.RLock()

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store a value, overwriting any existing entry.

        A TTL of zero or less means the entry is already expired: nothing is
        stored and any previous entry under the key is dropped.
        """
        ttl = self._default_ttl if ttl is None else ttl
        with self._lock:
            if ttl <= 0:
                self._store.delete(key)
                return
            self._store.set(key, CacheEntryEntity(value=value, stored_at=self._clock(), ttl=ttl))

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value under key if present and unexpired, else default.

        Expired entries are deleted as a side effect.
        """
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return default
            if not entry.is_valid(self._clock()):
                self._store.delete(key)
                return default
            return entry.value

    def invalidate(self, pattern: str | None = None) -> int:
        """Drop cached entries.

        Args:
            pattern: Delete every key containing this substring. If None, clear all.

        Returns:
            Number of entries removed
        """
        with self._lock:
            if pattern is None:
                removed = self._store.clear()
            else:
                removed = sum(1 for key in list(self._store.keys()) if pattern in key and self._store.delete(key))
        logger.debug("Invalidated %d cache entries (pattern=%r)", removed, pattern)
        return removed

    def sweep(self) -> int:
        """Remove every expired entry.

        Returns:
            Number of entries removed
        """
        removed = 0
        with self._lock:
            now = self._clock()
            for key in list(self._store.keys()):
                entry = self._store.get(key)
                if entry is not None and not entry.is_valid(now):
                    if self._store.delete(key):
                        removed += 1
        return removed

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._store.keys())

    def __contains__(self, key: str) -> bool:
        sentinel = object()
        return self.get(key, sentinel) is not sentinel

    def __len__(self) -> int:
        return len(self.keys())

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    @property
    def store(self) -> CacheStore:
        """Get the underlying store (for testing)."""
        return self._store
