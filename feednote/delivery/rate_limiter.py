"""
Delivery Rate Limiter
=====================

Token bucket shared by every delivery call to a single sink.

Permits accumulate at one per ``refill_interval`` up to ``max_permits``.
A caller that finds the bucket empty sleeps until the next whole
interval has elapsed, so steady-state traffic is admitted at exactly one
message per interval while short bursts up to capacity pass immediately.

Example:
    >>> limiter = RateLimiter(max_permits=3, refill_interval=10.0)
    >>> await limiter.wait()  # Returns immediately while permits remain
"""

import asyncio
import threading
import time

from ..utils.logging import get_logger_for_component


class RateLimiter:
    """Token bucket rate limiter for outbound notes.

    The internal lock is a ``threading.Lock`` that is never held across an
    ``await``, so one limiter can be shared by tasks on any event loop.

    Attributes:
        max_permits: Bucket capacity
        refill_interval: Seconds per refilled permit
    """

    def __init__(self, max_permits: int = 3, refill_interval: float = 10.0):
        """Initialize a full bucket.

        Args:
            max_permits: Bucket capacity (must be positive)
            refill_interval: Seconds between permit refills (must be positive)
        """
        if max_permits < 1:
            raise ValueError("max_permits must be at least 1")
        if refill_interval <= 0:
            raise ValueError("refill_interval must be positive")

        self.max_permits = max_permits
        self.refill_interval = float(refill_interval)
        self._permits = max_permits
        self._last_refill = time.monotonic()
        self._lock = threading.Lock()
        self.logger = get_logger_for_component("rate_limiter")

    def _refill(self, now: float) -> None:
        """Add whole elapsed intervals worth of permits. Caller holds the lock."""
        elapsed = now - self._last_refill
        intervals = int(elapsed // self.refill_interval)
        if intervals > 0:
            self._permits = min(self._permits + intervals, self.max_permits)
            self._last_refill += intervals * self.refill_interval

    async def wait(self) -> None:
        """Block until a permit is available and consume it.

        Raises:
            asyncio.CancelledError: If the waiting task is cancelled. No
                permit is consumed in that case.
        """
        with self._lock:
            now = time.monotonic()
            self._refill(now)

            if self._permits > 0:
                self._permits -= 1
                return

            remaining = self.refill_interval - (now - self._last_refill)

        self.logger.debug(f"Rate limit reached, waiting {remaining:.2f}s for a permit")
        await asyncio.sleep(max(remaining, 0.0))

        with self._lock:
            # The refilled permit goes straight to this caller
            self._permits = 1
            self._permits -= 1
            self._last_refill = time.monotonic()

    @property
    def available_permits(self) -> int:
        """Permits that could be taken right now without waiting."""
        with self._lock:
            self._refill(time.monotonic())
            return self._permits

    def reset(self) -> None:
        """Refill the bucket to capacity."""
        with self._lock:
            self._permits = self.max_permits
            self._last_refill = time.monotonic()
