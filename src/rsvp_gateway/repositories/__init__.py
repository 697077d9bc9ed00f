"""Repository layer for data access.

This layer abstracts storage and transport behind protocol-based interfaces:
- Cache entries: in-memory dict (default) or Redis
- Rate limit records: in-memory dict
- Upstream resource endpoint: httpx

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from rsvp_gateway.protocols import CacheStore, RateLimitStore, Transport

from .httpx_transport import HttpxTransport
from .memory_cache_store import InMemoryCacheStore
from .memory_rate_limit_store import InMemoryRateLimitStore
from .redis_cache_store import RedisCacheStore

__all__ = [
    "CacheStore",
    "RateLimitStore",
    "Transport",
    "HttpxTransport",
    "InMemoryCacheStore",
    "InMemoryRateLimitStore",
    "RedisCacheStore",
]
