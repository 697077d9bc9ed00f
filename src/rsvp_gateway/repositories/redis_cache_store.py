"""Redis implementation of CacheStore.

Lets several gateway processes share cached reads. Entries are stored as
JSON strings under ``{prefix}:{key}`` with a Redis expiry matching the
entry TTL, so Redis evicts them even if nobody reads them again.
"""

import json
import logging
import math

import redis

from rsvp_gateway.config import get_redis_client, settings
from rsvp_gateway.entities import CacheEntryEntity

logger = logging.getLogger(__name__)


class RedisCacheStore:
    """Redis-backed cache storage.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.

    The cache is non-authoritative: Redis failures are logged and reported
    as misses (or as no-ops for writes) rather than raised.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        prefix: str | None = None,
    ) -> None:
        """Initialize the Redis cache store.

        Args:
            redis_client: Redis client instance. If None, creates default.
            prefix: Key namespace. Defaults to settings.cache_key_prefix.
        """
        self._client = redis_client or get_redis_client()
        self._prefix = prefix or settings.cache_key_prefix

    @classmethod
    def create(cls, prefix: str | None = None) -> "RedisCacheStore":
        """Factory method to create RedisCacheStore with defaults.

        Args:
            prefix: Key namespace. If None, uses settings.

        Returns:
            Configured RedisCacheStore
        """
        return cls(prefix=prefix)

    def _redis_key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    def get(self, key: str) -> CacheEntryEntity | None:
        try:
            raw = self._client.get(self._redis_key(key))
        except redis.RedisError as e:
            logger.warning("Redis get failed for %s: %s", key, e)
            return None

        if raw is None:
            return None

        try:
            data = json.loads(raw)
            return CacheEntryEntity(
                value=data["value"],
                stored_at=float(data["stored_at"]),
                ttl=float(data["ttl"]),
            )
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Discarding undecodable cache entry %s: %s", key, e)
            self.delete(key)
            return None

    def set(self, key: str, entry: CacheEntryEntity) -> None:
        payload = json.dumps(
            {"value": entry.value, "stored_at": entry.stored_at, "ttl": entry.ttl},
            default=str,
        )
        expire_ms = max(1, math.ceil(entry.ttl * 1000))
        try:
            self._client.set(self._redis_key(key), payload, px=expire_ms)
        except redis.RedisError as e:
            logger.warning("Redis set failed for %s: %s", key, e)

    def delete(self, key: str) -> bool:
        try:
            result: int = self._client.delete(self._redis_key(key))  # type: ignore[assignment]
        except redis.RedisError as e:
            logger.warning("Redis delete failed for %s: %s", key, e)
            return False
        return result > 0

    def keys(self) -> list[str]:
        offset = len(self._prefix) + 1
        try:
            raw_keys = list(self._client.scan_iter(match=f"{self._prefix}:*"))
        except redis.RedisError as e:
            logger.warning("Redis scan failed: %s", e)
            return []
        return [(k.decode() if isinstance(k, bytes) else k)[offset:] for k in raw_keys]

    def clear(self) -> int:
        try:
            raw_keys = list(self._client.scan_iter(match=f"{self._prefix}:*"))
            if not raw_keys:
                return 0
            deleted: int = self._client.delete(*raw_keys)  # type: ignore[assignment]
        except redis.RedisError as e:
            logger.warning("Redis clear failed: %s", e)
            return 0
        return deleted

    def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
