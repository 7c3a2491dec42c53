"""
Inter-batch pacing for enrichment.

The enricher awaits policy.before_batch() before every batch after the
first. Policies are interchangeable: a fixed pause between batches, or a
token bucket that bounds the sustained request rate.
"""
import asyncio
import logging
import time
from typing import Protocol, runtime_checkable

from crisislens.core.config import DEFAULT_BATCH_DELAY_SECONDS

logger = logging.getLogger(__name__)


@runtime_checkable
class PacingPolicy(Protocol):
    async def before_batch(self, batch_index: int, batch_size: int) -> None:
        ...


class NoPacing:
    """Runs batches back to back."""

    async def before_batch(self, batch_index: int, batch_size: int) -> None:
        return None


class FixedDelayPacing:
    """Sleep a fixed interval before each batch."""

    def __init__(self, delay_seconds: float = DEFAULT_BATCH_DELAY_SECONDS):
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self.delay_seconds = delay_seconds

    async def before_batch(self, batch_index: int, batch_size: int) -> None:
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)


class TokenBucketPacing:
    """
    Token bucket limiter; each batch consumes one token per call.

    Tokens refill continuously at rate_per_second up to capacity. A batch
    larger than capacity waits for a full bucket.
    """

    def __init__(self, rate_per_second: float, capacity: float):
        if rate_per_second <= 0:
            raise ValueError("rate_per_second must be > 0")
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        self.rate_per_second = rate_per_second
        self.capacity = capacity
        self._tokens = capacity
        self._updated = time.monotonic()
        self._logger = logging.getLogger(f"{__name__}.TokenBucketPacing")

    def _refill(self):
        now = time.monotonic()
        self._tokens = min(self.capacity, self._tokens + (now - self._updated) * self.rate_per_second)
        self._updated = now

    async def before_batch(self, batch_index: int, batch_size: int) -> None:
        needed = min(float(batch_size), self.capacity)
        self._refill()
        if self._tokens < needed:
            wait = (needed - self._tokens) / self.rate_per_second
            self._logger.debug(f"[PACE] Batch {batch_index} waiting {wait:.2f}s for tokens")
            await asyncio.sleep(wait)
            self._refill()
        self._tokens = max(0.0, self._tokens - needed)
