"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from rsvp_gateway.config import settings
from rsvp_gateway.handlers import AuthHandler, RSVPHandler
from rsvp_gateway.logging_config import setup_logging
from rsvp_gateway.protocols import CacheStore, Transport
from rsvp_gateway.repositories import HttpxTransport, InMemoryCacheStore, RedisCacheStore
from rsvp_gateway.services import ApiClient, AuthService, ExpiringCache, RateLimiter, RSVPService

logger = logging.getLogger(__name__)


def _from_state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(f"{name} not initialized. Check lifespan setup.")
    return value


def get_rsvp_handler(request: Request) -> RSVPHandler:
    """Dependency injection for RSVPHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    return _from_state(request, "rsvp_handler")


def get_auth_handler(request: Request) -> AuthHandler:
    """Dependency injection for AuthHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    return _from_state(request, "auth_handler")


def get_rsvp_service(request: Request) -> RSVPService:
    return _from_state(request, "rsvp_service")


def get_rate_limiter(request: Request) -> RateLimiter:
    return _from_state(request, "rate_limiter")


def _build_cache_store() -> CacheStore:
    if settings.uses_redis:
        return RedisCacheStore.create(prefix=f"{settings.cache_key_prefix}:rsvps")
    return InMemoryCacheStore()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores them in app.state:
    1. Transport (data access) - app.state.transport may be preset by create_app
    2. Services (business logic) - rsvp_service, auth_service, rate_limiter
    3. Handlers (HTTP endpoints) - rsvp_handler, auth_handler

    Cleanup:
        Stops the limiter sweep, closes the transport, removes services from app.state
    """
    setup_logging()

    transport: Transport = getattr(app.state, "transport", None) or HttpxTransport.create()
    api_client = ApiClient(transport)

    rsvp_service = RSVPService(
        api_client=api_client,
        cache=ExpiringCache(store=_build_cache_store(), default_ttl=settings.rsvp_cache_ttl),
    )
    auth_service = AuthService(api_client=api_client)
    rate_limiter = RateLimiter()
    rate_limiter.start_sweeper()

    app.state.transport = transport
    app.state.api_client = api_client
    app.state.rsvp_service = rsvp_service
    app.state.auth_service = auth_service
    app.state.rate_limiter = rate_limiter
    app.state.rsvp_handler = RSVPHandler(rsvp_service=rsvp_service, rate_limiter=rate_limiter)
    app.state.auth_handler = AuthHandler(auth_service=auth_service, rate_limiter=rate_limiter)

    logger.info("RSVP gateway initialized (cache backend: %s)", settings.cache_backend)

    yield

    await rate_limiter.stop_sweeper()
    await api_client.close()
    for name in ("rsvp_handler", "auth_handler", "rate_limiter", "auth_service", "rsvp_service", "api_client"):
        delattr(app.state, name)
    logger.info("RSVP gateway shut down")


# Type aliases for cleaner dependency injection
RSVPHandlerDep = Annotated[RSVPHandler, Depends(get_rsvp_handler)]
AuthHandlerDep = Annotated[AuthHandler, Depends(get_auth_handler)]
RSVPServiceDep = Annotated[RSVPService, Depends(get_rsvp_service)]
RateLimiterDep = Annotated[RateLimiter, Depends(get_rate_limiter)]
