"""Response DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RSVPSubmitResponse(BaseModel):
    """Response DTO for a submitted RSVP."""

    message: str = Field(..., description="Human-readable status message")
    id: str | None = Field(None, description="Server-assigned RSVP id")


class PageResponse(BaseModel):
    """Response DTO for a page of results."""

    model_config = ConfigDict(populate_by_name=True)

    items: list[Any] = Field(default_factory=list)
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    total_pages: int = Field(..., alias="totalPages", ge=0)


class LoginResponse(BaseModel):
    """Response DTO for admin login."""

    success: bool
    message: str
    token: str | None = None
    user: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Uniform error body for every failure response."""

    error: str = Field(..., description="Display-safe error message")
    code: str | None = Field(None, description="Machine-readable error category")
    details: dict[str, list[str]] | None = Field(None, description="Field-level errors")
    reset_at: float | None = Field(None, description="When a rate limited caller may retry (Unix timestamp)")


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    upstream_healthy: bool = Field(..., description="Whether the upstream endpoint answered")
    cache_entries: int = Field(..., ge=0)
    rate_limit_identities: int = Field(..., ge=0)
