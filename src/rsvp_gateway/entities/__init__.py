"""Domain entities for internal representation.

These are pure dataclasses used internally by services and repositories.
They are NOT used for API contracts - use DTOs from the dto package for that.

Entities should have:
- No JSON serialization logic
- No Pydantic validation
- No external dependencies
"""

from .api_response import ApiResponse, TransportResponse
from .cache_entry import CacheEntryEntity
from .page import Page
from .rate_limit_record import RateLimitDecision, RateLimitRecord
from .service_config import ServiceConfig

__all__ = [
    "ApiResponse",
    "TransportResponse",
    "CacheEntryEntity",
    "Page",
    "RateLimitDecision",
    "RateLimitRecord",
    "ServiceConfig",
]
