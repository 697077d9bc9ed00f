import logging
import math
import time
from typing import Annotated, Any

from fastapi import FastAPI, Header, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rsvp_gateway.api.dependencies import (
    AuthHandlerDep,
    RateLimiterDep,
    RSVPHandlerDep,
    RSVPServiceDep,
    lifespan,
)
from rsvp_gateway.config import settings
from rsvp_gateway.dto import (
    ErrorResponse,
    HealthCheckResponse,
    LoginRequest,
    LoginResponse,
    PageResponse,
    RSVPCreateRequest,
    RSVPSubmitResponse,
    RSVPUpdateRequest,
)
from rsvp_gateway.errors import ErrorCategory, RateLimitedError, ServiceError, TypedError
from rsvp_gateway.protocols import Transport
from rsvp_gateway.security import SECURITY_HEADERS, client_identity

logger = logging.getLogger(__name__)

# Query parameters with their own meaning on list routes
_RESERVED_PARAMS = {"page", "limit", "q"}


def _error_json(status_code: int, body: ErrorResponse, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


def service_error_status(exc: ServiceError) -> int:
    """HTTP status for a failed service operation."""
    if exc.error is None:
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    if exc.category == ErrorCategory.NETWORK:
        return status.HTTP_503_SERVICE_UNAVAILABLE
    if exc.category == ErrorCategory.PARSE_ERROR:
        return status.HTTP_502_BAD_GATEWAY
    if 400 <= exc.error.status_code <= 599:
        return exc.error.status_code
    return status.HTTP_502_BAD_GATEWAY


async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
    error = exc.error
    return _error_json(
        service_error_status(exc),
        ErrorResponse(
            error=exc.message,
            code=exc.category.value if exc.category else None,
            details=error.details if error else None,
        ),
    )


async def handle_rate_limited(request: Request, exc: RateLimitedError) -> JSONResponse:
    retry_after = max(0, math.ceil(exc.reset_at - time.time()))
    return _error_json(
        status.HTTP_429_TOO_MANY_REQUESTS,
        ErrorResponse(error=exc.message, code=exc.category.value, reset_at=exc.reset_at),
        headers={"Retry-After": str(retry_after)},
    )


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_json(exc.status_code, ErrorResponse(error=str(exc.detail)), headers=exc.headers)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    details: dict[str, list[str]] = {}
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body") or "body"
        details.setdefault(field, []).append(err.get("msg", "Invalid value"))
    return _error_json(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        ErrorResponse(error="Validation failed. Please check your input.", details=details),
    )


def create_app(transport: Transport | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        transport: Upstream transport. If None, the lifespan creates an HttpxTransport.

    Returns:
        The configured application
    """
    app = FastAPI(
        title="RSVP Gateway API",
        description="Cached, rate limited gateway in front of the RSVP resource endpoint",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.transport = transport

    app.add_exception_handler(ServiceError, handle_service_error)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitedError, handle_rate_limited)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_validation_error)  # type: ignore[arg-type]

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        for key, value in SECURITY_HEADERS.items():
            response.headers[key] = value
        return response

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": "RSVP Gateway API",
            "version": "0.1.0",
            "endpoints": {
                "rsvps": "/rsvps",
                "login": "/auth/login",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.get("/health", response_model=HealthCheckResponse)
    async def health(request: Request, service: RSVPServiceDep, limiter: RateLimiterDep) -> HealthCheckResponse:
        """Health check endpoint."""
        upstream_healthy = True
        try:
            await service.api_client.get("/health")
        except TypedError as e:
            upstream_healthy = e.category != ErrorCategory.NETWORK

        return HealthCheckResponse(
            status="healthy" if upstream_healthy else "unhealthy",
            upstream_healthy=upstream_healthy,
            cache_entries=len(service.cache),
            rate_limit_identities=limiter.get_stats()["tracked_identities"],
        )

    @app.post("/auth/login", response_model=LoginResponse)
    async def login(body: LoginRequest, request: Request, handler: AuthHandlerDep) -> LoginResponse:
        return await handler.login(body, client_identity(request))

    @app.get("/rsvps")
    async def list_rsvps(request: Request, handler: RSVPHandlerDep) -> list[Any]:
        filters = {k: v for k, v in request.query_params.items() if k not in _RESERVED_PARAMS}
        return await handler.list_rsvps(filters)

    @app.post("/rsvps", response_model=RSVPSubmitResponse)
    async def submit_rsvp(body: RSVPCreateRequest, request: Request, handler: RSVPHandlerDep) -> RSVPSubmitResponse:
        return await handler.submit_rsvp(body, client_identity(request))

    @app.get("/rsvps/search")
    async def search_rsvps(handler: RSVPHandlerDep, q: Annotated[str, Query(min_length=1)]) -> list[Any]:
        return await handler.search_rsvps(q)

    @app.get("/rsvps/paginated", response_model=PageResponse)
    async def paginated_rsvps(
        request: Request,
        handler: RSVPHandlerDep,
        page: Annotated[int, Query(ge=1)] = 1,
        limit: Annotated[int, Query(ge=1, le=100)] = 10,
    ) -> PageResponse:
        filters = {k: v for k, v in request.query_params.items() if k not in _RESERVED_PARAMS}
        return await handler.paginated(page, limit, filters)

    @app.get("/rsvps/stats")
    async def rsvp_stats(
        handler: RSVPHandlerDep,
        auth: AuthHandlerDep,
        authorization: Annotated[str | None, Header()] = None,
    ) -> dict[str, Any]:
        await auth.require_admin(authorization)
        return await handler.stats()

    @app.get("/rsvps/export/csv", response_class=PlainTextResponse)
    async def export_rsvps(
        service: RSVPServiceDep,
        auth: AuthHandlerDep,
        attendance: Annotated[str, Query(pattern="^(all|yes|no|maybe)$")] = "all",
        authorization: Annotated[str | None, Header()] = None,
    ) -> str:
        await auth.require_admin(authorization)
        return await service.export_csv(attendance)

    @app.get("/rsvps/{rsvp_id}")
    async def get_rsvp(rsvp_id: str, handler: RSVPHandlerDep) -> Any:
        return await handler.get_rsvp(rsvp_id)

    @app.put("/rsvps/{rsvp_id}")
    async def update_rsvp(
        rsvp_id: str,
        body: RSVPUpdateRequest,
        handler: RSVPHandlerDep,
        auth: AuthHandlerDep,
        authorization: Annotated[str | None, Header()] = None,
    ) -> Any:
        await auth.require_admin(authorization)
        return await handler.update_rsvp(rsvp_id, body)

    @app.patch("/rsvps/{rsvp_id}")
    async def patch_rsvp(
        rsvp_id: str,
        body: RSVPUpdateRequest,
        handler: RSVPHandlerDep,
        auth: AuthHandlerDep,
        authorization: Annotated[str | None, Header()] = None,
    ) -> Any:
        await auth.require_admin(authorization)
        return await handler.patch_rsvp(rsvp_id, body)

    @app.delete("/rsvps/{rsvp_id}")
    async def delete_rsvp(
        rsvp_id: str,
        handler: RSVPHandlerDep,
        auth: AuthHandlerDep,
        authorization: Annotated[str | None, Header()] = None,
    ) -> dict[str, str]:
        await auth.require_admin(authorization)
        return await handler.delete_rsvp(rsvp_id)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rsvp_gateway.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
