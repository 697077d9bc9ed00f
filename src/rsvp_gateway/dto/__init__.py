"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import LoginRequest, RSVPCreateRequest, RSVPUpdateRequest
from .responses import (
    ErrorResponse,
    HealthCheckResponse,
    LoginResponse,
    PageResponse,
    RSVPSubmitResponse,
)

__all__ = [
    "LoginRequest",
    "RSVPCreateRequest",
    "RSVPUpdateRequest",
    "ErrorResponse",
    "HealthCheckResponse",
    "LoginResponse",
    "PageResponse",
    "RSVPSubmitResponse",
]
