"""HTTP handlers for RSVP operations.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like input sanitization, rate limiting and status
codes; service failures propagate as ServiceError and are rendered by the
application's exception handlers.
"""

import logging
from typing import Any

from fastapi import HTTPException, status

from rsvp_gateway.config import settings
from rsvp_gateway.dto import PageResponse, RSVPCreateRequest, RSVPSubmitResponse, RSVPUpdateRequest
from rsvp_gateway.errors import RateLimitedError
from rsvp_gateway.security import is_valid_email, sanitize_string
from rsvp_gateway.services import RateLimiter, RSVPService
from rsvp_gateway.services.rsvp_service import ATTENDANCE_VALUES

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("name", "email", "dietary", "plusOneName", "message")


class RSVPHandler:
    """HTTP handlers for the RSVP resource.

    Example:
        ```python
        handler = RSVPHandler(rsvp_service=service, rate_limiter=limiter)

        @app.post("/rsvps", response_model=RSVPSubmitResponse)
        async def submit(request: RSVPCreateRequest, http_request: Request):
            return await handler.submit_rsvp(request, client_identity(http_request))
        ```
    """

    def __init__(self, rsvp_service: RSVPService, rate_limiter: RateLimiter) -> None:
        self._rsvps = rsvp_service
        self._limiter = rate_limiter

    @staticmethod
    def _bad_request(detail: str) -> HTTPException:
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

    def _clean_form(self, request: RSVPCreateRequest) -> dict[str, Any]:
        name = sanitize_string(request.name)
        email = sanitize_string(request.email)
        attendance = sanitize_string(request.attendance)

        if len(name) < 2:
            raise self._bad_request("Name must be at least 2 characters")
        if not is_valid_email(email):
            raise self._bad_request("Invalid email address")
        if attendance not in ATTENDANCE_VALUES:
            raise self._bad_request("Invalid attendance value")

        return {
            "name": name,
            "email": email,
            "attendance": attendance,
            "dietary": sanitize_string(request.dietary) if request.dietary else "",
            "plusOne": request.plus_one,
            "plusOneName": sanitize_string(request.plus_one_name) if request.plus_one_name else None,
            "message": sanitize_string(request.message) if request.message else None,
        }

    def _clean_update(self, request: RSVPUpdateRequest, *, partial: bool) -> dict[str, Any]:
        """Sanitize the string fields of an update and re-check name and email.

        A partial update keeps explicit nulls; a full update drops them.
        """
        form = request.model_dump(by_alias=True, exclude_unset=partial, exclude_none=not partial)
        for field in _TEXT_FIELDS:
            if isinstance(form.get(field), str):
                form[field] = sanitize_string(form[field])

        if form.get("name") is not None and len(form["name"]) < 2:
            raise self._bad_request("Name must be at least 2 characters")
        if form.get("email") is not None and not is_valid_email(form["email"]):
            raise self._bad_request("Invalid email address")
        return form

    async def submit_rsvp(self, request: RSVPCreateRequest, client_ip: str) -> RSVPSubmitResponse:
        """Handle POST /rsvps requests.

        Raises:
            RateLimitedError: If the client exceeded its submission budget
            HTTPException: 400 on invalid input
        """
        decision = self._limiter.check_and_consume(
            f"rsvp:{client_ip}",
            settings.rsvp_rate_limit,
            settings.rsvp_rate_window,
        )
        if not decision.allowed:
            raise RateLimitedError(
                decision.reset_at,
                "Too many RSVP submissions. Please try again later.",
            )

        form = self._clean_form(request)
        created = await self._rsvps.create_rsvp(form)
        logger.info("New RSVP from %s (%s): %s", form["name"], form["email"], form["attendance"])

        rsvp_id = created.get("id") if isinstance(created, dict) else None
        return RSVPSubmitResponse(
            message="RSVP submitted successfully",
            id=str(rsvp_id) if rsvp_id is not None else None,
        )

    async def list_rsvps(self, filters: dict[str, str]) -> list[Any]:
        """Handle GET /rsvps requests."""
        return await self._rsvps.fetch_all(filters or None)

    async def search_rsvps(self, query: str) -> list[Any]:
        """Handle GET /rsvps/search requests."""
        return await self._rsvps.search_rsvps(query)

    async def paginated(self, page: int, limit: int, filters: dict[str, str]) -> PageResponse:
        """Handle GET /rsvps/paginated requests."""
        result = await self._rsvps.get_paginated(page, limit, filters or None)
        return PageResponse(
            items=result.items,
            total=result.total,
            page=result.page,
            total_pages=result.total_pages,
        )

    async def stats(self) -> dict[str, Any]:
        """Handle GET /rsvps/stats requests."""
        return await self._rsvps.get_stats()

    async def get_rsvp(self, rsvp_id: str) -> Any:
        """Handle GET /rsvps/{id} requests."""
        return await self._rsvps.fetch_by_id(rsvp_id)

    async def update_rsvp(self, rsvp_id: str, request: RSVPUpdateRequest) -> Any:
        """Handle PUT /rsvps/{id} requests."""
        form = self._clean_update(request, partial=False)
        return await self._rsvps.update_rsvp(rsvp_id, form)

    async def patch_rsvp(self, rsvp_id: str, request: RSVPUpdateRequest) -> Any:
        """Handle PATCH /rsvps/{id} requests."""
        payload = self._clean_update(request, partial=True)
        return await self._rsvps.partial_update(rsvp_id, payload)

    async def delete_rsvp(self, rsvp_id: str) -> dict[str, str]:
        """Handle DELETE /rsvps/{id} requests."""
        await self._rsvps.delete(rsvp_id)
        return {"message": "RSVP deleted"}
