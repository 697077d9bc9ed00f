"""Typed error taxonomy shared by every layer.

Transport failures of any origin (unreachable upstream, non-success status,
undecodable body) surface as one ``TypedError`` shape. Services wrap those in
``ServiceError`` so callers can handle every operation identically, and
``error_message`` turns any of them into a single display string.
"""

from enum import Enum
from typing import Any

NETWORK_ERROR_CODE = "NETWORK_ERROR"
PARSE_ERROR_MESSAGE = "Failed to parse response"

FALLBACK_MESSAGE = "An unexpected error occurred."


class ErrorCategory(str, Enum):
    """Failure classification used for presentation and HTTP mapping."""

    NETWORK = "network"
    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"
    PARSE_ERROR = "parse_error"
    RATE_LIMITED = "rate_limited"


class TypedError(Exception):
    """Normalized transport failure.

    Attributes are exposed read-only; an instance is never mutated after
    creation.

    Attributes:
        message: Human readable message (server-provided when available)
        status_code: HTTP-equivalent status, 0 when no response was received
        code: Optional machine code (e.g. NETWORK_ERROR)
        details: Optional field-level errors, field name -> messages
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        code: str | None = None,
        details: dict[str, list[str]] | None = None,
        *,
        parse_error: bool = False,
    ) -> None:
        super().__init__(message)
        self._message = message
        self._status_code = status_code
        self._code = code
        self._details = {field: list(msgs) for field, msgs in details.items()} if details else None
        self._parse_error = parse_error

    @property
    def message(self) -> str:
        return self._message

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def code(self) -> str | None:
        return self._code

    @property
    def details(self) -> dict[str, list[str]] | None:
        if self._details is None:
            return None
        return {field: list(msgs) for field, msgs in self._details.items()}

    @property
    def category(self) -> ErrorCategory:
        """Classify the error by status code and machine code."""
        if self._status_code == 0 or self._code == NETWORK_ERROR_CODE:
            return ErrorCategory.NETWORK
        if self._parse_error:
            return ErrorCategory.PARSE_ERROR
        if self._status_code == 429:
            return ErrorCategory.RATE_LIMITED
        if self._status_code >= 500:
            return ErrorCategory.SERVER_ERROR
        return ErrorCategory.CLIENT_ERROR

    @classmethod
    def network(cls, message: str) -> "TypedError":
        """Build the error for a call that never received a response."""
        return cls(message or "Network request failed", 0, NETWORK_ERROR_CODE)

    @classmethod
    def parse_failure(cls, status_code: int) -> "TypedError":
        """Build the error for a response whose body could not be decoded."""
        return cls(PARSE_ERROR_MESSAGE, status_code, parse_error=True)

    def __repr__(self) -> str:
        return f"TypedError(status_code={self._status_code}, code={self._code!r}, message={self._message!r})"


class ServiceError(Exception):
    """Failure of a service operation, carrying a user-facing message.

    Attributes:
        message: Display-safe message
        error: The underlying TypedError, if the failure came from the transport
    """

    def __init__(self, message: str, error: TypedError | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.error = error

    @property
    def status_code(self) -> int | None:
        return self.error.status_code if self.error else None

    @property
    def category(self) -> ErrorCategory | None:
        return self.error.category if self.error else None


class RateLimitedError(Exception):
    """Request denied by the rate limiter before any transport call was made."""

    category = ErrorCategory.RATE_LIMITED

    def __init__(self, reset_at: float, message: str = "Too many requests. Please try again later.") -> None:
        super().__init__(message)
        self.message = message
        self.reset_at = reset_at


def coerce_details(raw: Any) -> dict[str, list[str]] | None:
    """Coerce a server-provided details mapping to ``field -> [messages]``."""
    if not isinstance(raw, dict) or not raw:
        return None

    details: dict[str, list[str]] = {}
    for field, value in raw.items():
        if isinstance(value, (list, tuple)):
            details[str(field)] = [str(item) for item in value]
        elif value is not None:
            details[str(field)] = [str(value)]
    return details or None


def _validation_summary(error: TypedError, fallback: str) -> str:
    details = error.details
    if details:
        summary = ", ".join(msg for msgs in details.values() for msg in msgs if msg)
        if summary:
            return summary
    return error.message or fallback


def error_message(error: TypedError) -> str:
    """Map a TypedError to one display string by status category.

    The mapping is total: every status code yields a non-empty message.
    """
    status_code = error.status_code

    if status_code == 400:
        return _validation_summary(error, "Bad request")
    if status_code == 401:
        return "Your session has expired. Please log in again."
    if status_code == 403:
        return "You do not have permission to perform this action."
    if status_code == 404:
        return "The requested resource was not found."
    if status_code == 409:
        return "This action conflicts with existing data."
    if status_code == 422:
        return _validation_summary(error, "Validation failed. Please check your input.")
    if status_code == 429:
        return "Too many requests. Please try again later."
    if 500 <= status_code <= 599:
        return "An internal server error occurred. Please try again later."
    if status_code == 0:
        return "Unable to connect to the server. Please check your internet connection."
    return error.message or FALLBACK_MESSAGE


def is_network_error(error: TypedError) -> bool:
    return error.status_code == 0 or error.code == NETWORK_ERROR_CODE


def is_authentication_error(error: TypedError) -> bool:
    return error.status_code == 401


def is_validation_error(error: TypedError) -> bool:
    return error.status_code in (400, 422)


def is_not_found_error(error: TypedError) -> bool:
    return error.status_code == 404
