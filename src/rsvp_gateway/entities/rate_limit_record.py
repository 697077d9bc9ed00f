"""Rate limit domain entities."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitRecord:
    """Request count for one caller identity within a fixed window.

    Attributes:
        count: Requests admitted in the current window
        window_reset_at: When the current window ends (Unix timestamp)
    """

    count: int
    window_reset_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.window_reset_at


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a rate limit check.

    Attributes:
        allowed: Whether the request may proceed
        reset_at: When the identity's current window ends (Unix timestamp)
    """

    allowed: bool
    reset_at: float
