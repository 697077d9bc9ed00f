"""API client with response normalization.

Wraps a Transport and converts every outcome into either an ApiResponse or
a TypedError:

- no response (connection failure, timeout) -> status 0, NETWORK_ERROR
- body cannot be decoded -> response status, "Failed to parse response"
- failure status -> response status, server message, code and details
- success -> unwrapped ``data`` member (or the whole body) plus message
"""

import asyncio
import json
import logging
from typing import Any

import httpx

from rsvp_gateway.config import settings
from rsvp_gateway.entities import ApiResponse, TransportResponse
from rsvp_gateway.errors import TypedError, coerce_details
from rsvp_gateway.protocols import Transport

logger = logging.getLogger(__name__)


def _stringify_params(params: dict[str, Any] | None) -> dict[str, str] | None:
    if not params:
        return None
    result = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        result[key] = str(value)
    return result or None


def _decode_body(response: TransportResponse) -> Any:
    if response.is_json:
        if not response.content.strip():
            return None
        return json.loads(response.content)
    return response.content.decode("utf-8")


def parse_response(response: TransportResponse) -> ApiResponse:
    """Normalize a raw TransportResponse.

    Args:
        response: The transport result

    Returns:
        ApiResponse for success statuses

    Raises:
        TypedError: If the body is undecodable or the status is a failure
    """
    try:
        data = _decode_body(response)
    except (ValueError, UnicodeDecodeError) as e:
        raise TypedError.parse_failure(response.status) from e

    if not response.ok:
        body = data if isinstance(data, dict) else {}
        message = body.get("message") or body.get("error") or f"HTTP {response.status}: {response.reason}".rstrip(": ")
        raise TypedError(
            str(message),
            response.status,
            body.get("code"),
            coerce_details(body.get("errors") or body.get("details")),
        )

    if isinstance(data, dict):
        value = data["data"] if "data" in data else data
        message = data.get("message")
        return ApiResponse(value=value, status=response.status, message=str(message) if message else None)

    return ApiResponse(value=data, status=response.status)


class ApiClient:
    """Verb helpers over a Transport, raising TypedError on any failure.

    Example:
        ```python
        client = ApiClient(HttpxTransport.create())
        response = await client.get("/rsvps", params={"attendance": "yes"})
        print(response.value)
        ```
    """

    def __init__(self, transport: Transport, timeout: float | None = None) -> None:
        """Initialize the client.

        Args:
            transport: Request-issuing backend (required).
            timeout: Per-call timeout in seconds. Defaults to settings.upstream_timeout.
        """
        self._transport = transport
        self._timeout = settings.upstream_timeout if timeout is None else timeout

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> ApiResponse:
        """Issue a request and normalize the outcome.

        Args:
            method: HTTP verb
            path: Path relative to the transport base
            body: JSON-serializable request body
            params: Query parameters (values are stringified, None dropped)
            headers: Extra headers
            timeout: Override the client timeout for this call

        Returns:
            ApiResponse on success

        Raises:
            TypedError: On network failure, timeout, undecodable body or failure status
        """
        try:
            response = await asyncio.wait_for(
                self._transport.issue(
                    method,
                    path,
                    body=body,
                    headers=headers,
                    params=_stringify_params(params),
                ),
                timeout=self._timeout if timeout is None else timeout,
            )
        except asyncio.TimeoutError as e:
            raise TypedError.network(f"Request to {path} timed out") from e
        except (httpx.TransportError, OSError) as e:
            raise TypedError.network(str(e) or type(e).__name__) from e

        result = parse_response(response)
        logger.debug("%s %s -> %d", method, path, result.status)
        return result

    async def get(self, path: str, params: dict[str, Any] | None = None, **kwargs: Any) -> ApiResponse:
        return await self.request("GET", path, params=params, **kwargs)

    async def post(self, path: str, body: Any = None, **kwargs: Any) -> ApiResponse:
        return await self.request("POST", path, body=body, **kwargs)

    async def put(self, path: str, body: Any = None, **kwargs: Any) -> ApiResponse:
        return await self.request("PUT", path, body=body, **kwargs)

    async def patch(self, path: str, body: Any = None, **kwargs: Any) -> ApiResponse:
        return await self.request("PATCH", path, body=body, **kwargs)

    async def delete(self, path: str, params: dict[str, Any] | None = None, **kwargs: Any) -> ApiResponse:
        return await self.request("DELETE", path, params=params, **kwargs)

    async def close(self) -> None:
        await self._transport.close()

    @property
    def transport(self) -> Transport:
        """Get the underlying transport (for testing)."""
        return self._transport
