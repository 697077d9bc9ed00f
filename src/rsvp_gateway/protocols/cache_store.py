"""Cache storage protocol.

Defines the interface for the key -> entry mapping behind ExpiringCache.
Expiry policy lives in the cache service, not in the store.

Implementations can include:
- In-process dict (default)
- Redis, for sharing entries between processes
"""

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from rsvp_gateway.entities import CacheEntryEntity


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for cache storage backends.

    Any type that implements these methods satisfies the protocol,
    no explicit inheritance needed.
    """

    def get(self, key: str) -> CacheEntryEntity | None:
        """Return the entry stored under key, or None."""
        ...

    def set(self, key: str, entry: CacheEntryEntity) -> None:
        """Store an entry, replacing any existing one."""
        ...

    def delete(self, key: str) -> bool:
        """Delete an entry.

        Returns:
            True if an entry was removed, False otherwise
        """
        ...

    def keys(self) -> Iterable[str]:
        """Return every stored key."""
        ...

    def clear(self) -> int:
        """Remove every entry.

        Returns:
            Number of entries deleted
        """
        ...
