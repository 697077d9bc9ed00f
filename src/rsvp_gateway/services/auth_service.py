"""Admin authentication against the upstream endpoint.

Token validity is whatever the upstream says it is; this service only
relays credentials and asks.
"""

from typing import Any

from rsvp_gateway.errors import TypedError, is_authentication_error
from rsvp_gateway.services.api_client import ApiClient
from rsvp_gateway.services.guard import service_operation


class AuthService:
    """Login and token validation relay."""

    def __init__(self, api_client: ApiClient, endpoint: str = "/auth") -> None:
        self._api = api_client
        self._endpoint = endpoint

    async def login(self, password: str) -> dict[str, Any]:
        """Exchange the admin password for a token.

        Returns:
            The upstream login payload (token, user, message)
        """
        with service_operation("log in"):
            response = await self._api.post(f"{self._endpoint}/login", {"password": password})
            payload = dict(response.value) if isinstance(response.value, dict) else {}
            if response.message and "message" not in payload:
                payload["message"] = response.message
            return payload

    async def validate_token(self, token: str) -> bool:
        """Ask the upstream whether a bearer token is valid.

        An authentication failure means False; any other failure propagates.
        """
        with service_operation("validate token"):
            try:
                response = await self._api.get(
                    f"{self._endpoint}/validate",
                    headers={"Authorization": f"Bearer {token}"},
                )
            except TypedError as e:
                if is_authentication_error(e):
                    return False
                raise

            if isinstance(response.value, dict):
                return bool(response.value.get("valid", False))
            return bool(response.value)
