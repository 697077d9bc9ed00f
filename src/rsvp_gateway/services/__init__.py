"""Service layer for business logic.

This layer contains the dispatch core: the expiring cache, the rate limiter,
the normalizing API client and the resource services built on them.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

Usage:
    ```python
    from rsvp_gateway.repositories import HttpxTransport
    from rsvp_gateway.services import ApiClient, RSVPService

    rsvps = RSVPService(api_client=ApiClient(HttpxTransport.create()))
    guests = await rsvps.fetch_all()
    ```
"""

from .api_client import ApiClient, parse_response
from .auth_service import AuthService
from .expiring_cache import ExpiringCache, build_cache_key
from .guard import service_operation
from .rate_limiter import RateLimiter
from .resource_service import ResourceService
from .rsvp_service import RSVPService

__all__ = [
    "ApiClient",
    "AuthService",
    "ExpiringCache",
    "RateLimiter",
    "ResourceService",
    "RSVPService",
    "build_cache_key",
    "parse_response",
    "service_operation",
]
