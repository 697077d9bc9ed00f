"""In-memory implementation of RateLimitStore."""

from rsvp_gateway.entities import RateLimitRecord


class InMemoryRateLimitStore:
    """Dict-backed rate limit record storage.

    Satisfies the RateLimitStore protocol through structural typing.
    RateLimiter serializes access.
    """

    def __init__(self) -> None:
        self._records: dict[str, RateLimitRecord] = {}

    def get(self, identity: str) -> RateLimitRecord | None:
        return self._records.get(identity)

    def set(self, identity: str, record: RateLimitRecord) -> None:
        self._records[identity] = record

    def delete(self, identity: str) -> bool:
        return self._records.pop(identity, None) is not None

    def items(self) -> list[tuple[str, RateLimitRecord]]:
        return list(self._records.items())

    def __len__(self) -> int:
        return len(self._records)
