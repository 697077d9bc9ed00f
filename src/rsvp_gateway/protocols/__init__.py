"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Swapping the in-memory cache or limiter storage for a shared store (Redis)
- Swapping the HTTP transport for a file-backed or fake one in tests
- Clear separation of concerns

Usage:
    ```python
    from rsvp_gateway.protocols import CacheStore, Transport

    store: CacheStore = InMemoryCacheStore()     # works
    store: CacheStore = RedisCacheStore(...)     # also works
    ```
"""

from .cache_store import CacheStore
from .rate_limit_store import RateLimitStore
from .transport import Transport

__all__ = [
    "CacheStore",
    "RateLimitStore",
    "Transport",
]
