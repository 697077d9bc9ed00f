"""Transport protocol.

The one capability the core consumes from its environment: issue a verb
against a path and get back a status and a body. Whether the exchange goes
over HTTP, reads a file, or hits an in-memory fake is up to the
implementation.
"""

from typing import Any, Protocol, runtime_checkable

from rsvp_gateway.entities import TransportResponse


@runtime_checkable
class Transport(Protocol):
    """Protocol for request-issuing backends.

    Implementations must raise ``OSError`` (or ``httpx.TransportError``) when
    no response could be obtained; any status code, including failures, is
    returned as a TransportResponse.
    """

    async def issue(
        self,
        method: str,
        path: str,
        body: Any = None,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> TransportResponse:
        """Issue a request.

        Args:
            method: HTTP verb (GET, POST, PUT, PATCH, DELETE)
            path: Path relative to the transport's base
            body: JSON-serializable request body
            headers: Extra request headers
            params: Query parameters

        Returns:
            The raw TransportResponse
        """
        ...

    async def close(self) -> None:
        """Release any underlying connections."""
        ...
