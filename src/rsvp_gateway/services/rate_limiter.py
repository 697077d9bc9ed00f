"""Fixed-window rate limiter keyed by caller identity.

Each identity gets a counter and a window end. The first request after the
window ends opens a new window with count 1, so up to twice the nominal
rate can pass across a window boundary. Request handlers size their limits
with that in mind.

Thread-safe via threading.Lock; an optional asyncio task purges expired
records periodically.
"""

import asyncio
import contextlib
import logging
import threading
import time
from collections.abc import Callable

from rsvp_gateway.config import settings
from rsvp_gateway.entities import RateLimitDecision, RateLimitRecord
from rsvp_gateway.protocols import RateLimitStore
from rsvp_gateway.repositories import InMemoryRateLimitStore

logger = logging.getLogger(__name__)


class RateLimiter:
    """Per-identity fixed-window request counter.

    Usage:
        limiter = RateLimiter()

        decision = limiter.check_and_consume(f"rsvp:{ip}", 10, 3600)
        if not decision.allowed:
            raise RateLimitedError(decision.reset_at)
    """

    def __init__(
        self,
        store: RateLimitStore | None = None,
        clock: Callable[[], float] = time.time,
        sweep_interval: float | None = None,
    ) -> None:
        self._store = store if store is not None else InMemoryRateLimitStore()
        self._clock = clock
        self._sweep_interval = settings.rate_limit_sweep_interval if sweep_interval is None else sweep_interval
        self._lock = threading.Lock()
        self._sweeper: asyncio.Task | None = None

    def check_and_consume(self, identity: str, max_requests: int, window: float) -> RateLimitDecision:
        """Check the identity's budget and consume one request if allowed.

        Rejected requests do not increment the counter.

        Args:
            identity: Caller identity (e.g. "rsvp:203.0.113.7")
            max_requests: Requests allowed per window
            window: Window length in seconds

        Returns:
            RateLimitDecision with the allow flag and the window end
        """
        with self._lock:
            now = self._clock()
            record = self._store.get(identity)

            if record is None or record.is_expired(now):
                reset_at = now + window
                self._store.set(identity, RateLimitRecord(count=1, window_reset_at=reset_at))
                return RateLimitDecision(allowed=True, reset_at=reset_at)

            if record.count < max_requests:
                self._store.set(
                    identity,
                    RateLimitRecord(count=record.count + 1, window_reset_at=record.window_reset_at),
                )
                return RateLimitDecision(allowed=True, reset_at=record.window_reset_at)

        logger.info("Rate limit exceeded for %s (limit %d)", identity, max_requests)
        return RateLimitDecision(allowed=False, reset_at=record.window_reset_at)

    def sweep(self) -> int:
        """Purge records whose window has already ended.

        Returns:
            Number of records removed
        """
        removed = 0
        with self._lock:
            now = self._clock()
            for identity, record in list(self._store.items()):
                if record.is_expired(now) and self._store.delete(identity):
                    removed += 1
        if removed:
            logger.debug("Swept %d expired rate limit records", removed)
        return removed

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            self.sweep()

    def start_sweeper(self) -> None:
        """Start the periodic sweep on the running event loop."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.get_running_loop().create_task(self._sweep_loop())

    async def stop_sweeper(self) -> None:
        """Cancel the periodic sweep and wait for it to finish."""
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._sweeper
        self._sweeper = None

    def get_stats(self) -> dict:
        """Get limiter statistics."""
        with self._lock:
            tracked = len(list(self._store.items()))
        return {
            "tracked_identities": tracked,
            "sweep_interval": self._sweep_interval,
            "sweeper_running": self._sweeper is not None and not self._sweeper.done(),
        }

    @property
    def store(self) -> RateLimitStore:
        """Get the underlying store (for testing)."""
        return self._store
