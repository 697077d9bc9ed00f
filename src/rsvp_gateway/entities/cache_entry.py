"""Cache entry domain entity."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntryEntity:
    """A value held by the expiring cache.

    Owned by the cache that created it; never handed out to callers,
    only its ``value`` is.

    Attributes:
        value: The cached read result
        stored_at: When the entry was stored (Unix timestamp)
        ttl: Time-to-live in seconds
    """

    value: Any
    stored_at: float
    ttl: float

    def is_valid(self, now: float) -> bool:
        """An entry is valid iff ``now - stored_at < ttl``."""
        return now - self.stored_at < self.ttl

    @property
    def expires_at(self) -> float:
        return self.stored_at + self.ttl
