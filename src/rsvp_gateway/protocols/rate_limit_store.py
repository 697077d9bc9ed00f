"""Rate limit record storage protocol."""

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from rsvp_gateway.entities import RateLimitRecord


@runtime_checkable
class RateLimitStore(Protocol):
    """Protocol for identity -> RateLimitRecord storage.

    The RateLimiter serializes read-modify-write sequences itself;
    stores only need single-call atomicity.
    """

    def get(self, identity: str) -> RateLimitRecord | None:
        ...

    def set(self, identity: str, record: RateLimitRecord) -> None:
        ...

    def delete(self, identity: str) -> bool:
        ...

    def items(self) -> Iterable[tuple[str, RateLimitRecord]]:
        ...
