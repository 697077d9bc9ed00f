"""RSVP Gateway - cached, rate limited dispatch core for the RSVP site.

This package provides a layered architecture around one resource endpoint:

Layers:
    - protocols: Interface contracts (CacheStore, RateLimitStore, Transport)
    - repositories: Storage and transport implementations
    - services: Expiring cache, rate limiter, API client, resource services
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)
    - errors: Typed error taxonomy and display messages

Usage:
    ```python
    from rsvp_gateway.repositories import HttpxTransport
    from rsvp_gateway.services import ApiClient, RSVPService

    rsvps = RSVPService(api_client=ApiClient(HttpxTransport.create()))
    guests = await rsvps.fetch_all({"attendance": "yes"})
    ```

For HTTP API:
    ```python
    from rsvp_gateway.api.app import app
    ```
"""

from rsvp_gateway.config import get_redis_client, settings
from rsvp_gateway.dto import LoginRequest, RSVPCreateRequest, RSVPUpdateRequest
from rsvp_gateway.entities import ApiResponse, CacheEntryEntity, Page, RateLimitDecision, ServiceConfig
from rsvp_gateway.errors import (
    ErrorCategory,
    RateLimitedError,
    ServiceError,
    TypedError,
    error_message,
)
from rsvp_gateway.handlers import AuthHandler, RSVPHandler
from rsvp_gateway.protocols import CacheStore, RateLimitStore, Transport
from rsvp_gateway.repositories import (
    HttpxTransport,
    InMemoryCacheStore,
    InMemoryRateLimitStore,
    RedisCacheStore,
)
from rsvp_gateway.services import (
    ApiClient,
    AuthService,
    ExpiringCache,
    RateLimiter,
    ResourceService,
    RSVPService,
)

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    # Protocols (interfaces)
    "CacheStore",
    "RateLimitStore",
    "Transport",
    # Services (business logic)
    "ApiClient",
    "AuthService",
    "ExpiringCache",
    "RateLimiter",
    "ResourceService",
    "RSVPService",
    # Handlers (HTTP)
    "AuthHandler",
    "RSVPHandler",
    # Repositories (data access)
    "HttpxTransport",
    "InMemoryCacheStore",
    "InMemoryRateLimitStore",
    "RedisCacheStore",
    # Entities (domain models)
    "ApiResponse",
    "CacheEntryEntity",
    "Page",
    "RateLimitDecision",
    "ServiceConfig",
    # Errors
    "ErrorCategory",
    "RateLimitedError",
    "ServiceError",
    "TypedError",
    "error_message",
    # DTOs (API contracts)
    "LoginRequest",
    "RSVPCreateRequest",
    "RSVPUpdateRequest",
]
