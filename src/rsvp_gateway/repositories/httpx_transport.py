"""httpx-based implementation of the Transport protocol.

Issues JSON requests against the upstream resource endpoint configured by
UPSTREAM_BASE_URL. Connection failures and timeouts propagate as
``httpx.TransportError``; ApiClient turns them into network errors.
"""

from typing import Any

import httpx

from rsvp_gateway.config import settings
from rsvp_gateway.entities import TransportResponse


class HttpxTransport:
    """httpx implementation of Transport.

    This class satisfies the Transport protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        transport = HttpxTransport.create(base_url="http://localhost:3000/api")
        response = await transport.issue("GET", "/rsvps")
        print(response.status)
        ```
    """

    DEFAULT_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            base_url: Upstream base URL. Defaults to settings.upstream_base_url.
            timeout: Request timeout in seconds. Defaults to settings.upstream_timeout.
            transport: Optional httpx transport (e.g. httpx.MockTransport for tests).
        """
        self._base_url = base_url or settings.upstream_base_url
        self._timeout = settings.upstream_timeout if timeout is None else timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def create(
        cls,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> "HttpxTransport":
        """Factory method to create HttpxTransport with defaults.

        Args:
            base_url: Upstream base URL. If None, uses settings.
            timeout: Request timeout in seconds. If None, uses settings.

        Returns:
            Configured HttpxTransport
        """
        return cls(base_url=base_url, timeout=timeout)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client.

        Returns:
            The httpx.AsyncClient instance
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers=self.DEFAULT_HEADERS,
                transport=self._transport,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    async def issue(
        self,
        method: str,
        path: str,
        body: Any = None,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> TransportResponse:
        response = await self.client.request(
            method,
            path,
            json=body,
            headers=headers,
            params=params,
        )
        return TransportResponse(
            status=response.status_code,
            content=response.content,
            content_type=response.headers.get("content-type"),
            reason=response.reason_phrase,
            headers=dict(response.headers),
        )

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def base_url(self) -> str:
        return self._base_url
