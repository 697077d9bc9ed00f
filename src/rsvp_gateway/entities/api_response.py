"""Transport-level and unwrapped response entities."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TransportResponse:
    """Raw result of a Transport.issue call.

    Attributes:
        status: HTTP-equivalent status code
        content: Undecoded response body
        content_type: Media type of the body, if known
        reason: Status reason phrase, if known
    """

    status: int
    content: bytes = b""
    content_type: str | None = None
    reason: str = ""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def is_json(self) -> bool:
        return bool(self.content_type) and "json" in self.content_type.lower()


@dataclass(frozen=True)
class ApiResponse:
    """Successful, unwrapped response envelope.

    Attributes:
        value: The payload (the envelope's ``data`` member, or the whole body)
        status: HTTP-equivalent status code
        message: Optional server-provided message
    """

    value: Any
    status: int
    message: str | None = None
