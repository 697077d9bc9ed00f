"""RSVP resource service.

Adds RSVP-specific reads (stats, analytics, lookups by email or attendance)
on top of the generic dispatcher. Stats and analytics are derived from the
whole guest list, so any RSVP write also drops those cached reads.
"""

from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

from rsvp_gateway.config import settings
from rsvp_gateway.entities import ServiceConfig
from rsvp_gateway.errors import ServiceError, TypedError, is_not_found_error
from rsvp_gateway.services.api_client import ApiClient
from rsvp_gateway.services.expiring_cache import ExpiringCache
from rsvp_gateway.services.guard import service_operation
from rsvp_gateway.services.resource_service import ResourceService

RSVP_ENDPOINT = "/rsvps"
ANALYTICS_TTL = 300.0

RSVP_FIELDS = ("name", "email", "attendance", "dietary", "plusOne", "plusOneName", "message")
ATTENDANCE_VALUES = ("yes", "no", "maybe")


class RSVPService(ResourceService):
    """ResourceService bound to the RSVP endpoint."""

    def __init__(
        self,
        api_client: ApiClient,
        cache: ExpiringCache | None = None,
        config: ServiceConfig | None = None,
    ) -> None:
        super().__init__(
            config=config or ServiceConfig(endpoint=RSVP_ENDPOINT, cache_ttl=settings.rsvp_cache_ttl),
            api_client=api_client,
            cache=cache,
        )

    def _invalidate_derived(self) -> None:
        self.invalidate("analytics")
        self.invalidate("stats")

    async def create_rsvp(self, form: dict[str, Any]) -> Any:
        """Submit a new RSVP, stamping the submission time."""
        with service_operation("create RSVP"):
            payload = {field: form.get(field) for field in RSVP_FIELDS}
            payload["submittedAt"] = datetime.now(timezone.utc).isoformat()
            created = await self.create(payload)
            self._invalidate_derived()
            return created

    async def update_rsvp(self, rsvp_id: str, form: dict[str, Any]) -> Any:
        """Update an RSVP with only the fields that were provided."""
        with service_operation("update RSVP"):
            clean = {field: form[field] for field in RSVP_FIELDS if form.get(field) is not None}
            updated = await self.update(rsvp_id, clean)
            self._invalidate_derived()
            return updated

    async def get_by_email(self, email: str) -> Any | None:
        """Look up an RSVP by email; None if the guest has not responded."""
        with service_operation(f"fetch RSVP with email {email}"):
            key = self.cache_key("get_by_email", email.lower())
            try:
                return await self._cached_get(key, f"{RSVP_ENDPOINT}/by-email/{quote(email, safe='')}")
            except TypedError as e:
                if is_not_found_error(e):
                    return None
                raise

    async def get_stats(self) -> dict[str, Any]:
        with service_operation("fetch RSVP statistics"):
            return await self._cached_get(self.cache_key("stats"), f"{RSVP_ENDPOINT}/stats")

    async def get_analytics(self) -> dict[str, Any]:
        with service_operation("fetch RSVP analytics"):
            return await self._cached_get(
                self.cache_key("analytics"),
                f"{RSVP_ENDPOINT}/analytics",
                ttl=ANALYTICS_TTL,
            )

    async def get_by_attendance_status(self, attendance: str) -> list[Any]:
        if attendance not in ATTENDANCE_VALUES:
            raise ServiceError(f"Invalid attendance value: {attendance}")
        with service_operation(f"fetch {attendance} RSVPs"):
            return await self.fetch_all({"attendance": attendance})

    async def get_with_dietary_requirements(self) -> list[Any]:
        with service_operation("fetch RSVPs with dietary requirements"):
            return await self.fetch_all({"hasDietary": "true"})

    async def get_recent_activity(self, limit: int = 10) -> list[Any]:
        with service_operation("fetch recent RSVP activity"):
            return await self.fetch_all({"orderBy": "updatedAt", "order": "desc", "limit": str(limit)})

    async def search_rsvps(self, query: str) -> list[Any]:
        return await self.search(query, {})

    async def export_csv(self, attendance: str = "all") -> str:
        """Export RSVPs as CSV text. Never cached."""
        with service_operation("export RSVPs to CSV"):
            params = {"attendance": attendance} if attendance != "all" else None
            response = await self.api_client.get(f"{RSVP_ENDPOINT}/export/csv", params=params)
            return response.value if isinstance(response.value, str) else str(response.value)

    async def bulk_update_attendance(self, updates: list[dict[str, str]]) -> list[Any]:
        """Set the attendance of several RSVPs at once.

        Args:
            updates: Entries of the form ``{"id": ..., "attendance": "yes"}``
        """
        with service_operation("bulk update attendance"):
            response = await self.api_client.put(f"{RSVP_ENDPOINT}/bulk-attendance", {"updates": updates})
            self.invalidate()
            return response.value
