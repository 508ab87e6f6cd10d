"""
Rate limiting primitives.

TokenBucketRateLimiter paces outbound provider calls (awaited before each
embedding request). SlidingWindowRateLimiter enforces per-identity
request allowances on the query endpoints.

Dependencies: asyncio, time, collections
System role: Provider pacing and request governance
"""

import asyncio
import logging
import time
from collections import deque

from curriculum_rag.core.exceptions import RateLimitError

logger = logging.getLogger(__name__)


class TokenBucketRateLimiter:
    """
    Async token bucket.

    Tokens refill continuously at `rate` per second up to `capacity`.
    acquire() waits until a token is available and consumes it.
    """

    def __init__(self, rate: float, capacity: int = 1) -> None:
        if rate <= 0:
            raise ValueError("rate must be positive")
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.rate = rate
        self.capacity = capacity
        self._tokens = float(capacity)
        self._updated = time.monotonic()
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        now = time.monotonic()
        self._tokens = min(self.capacity, self._tokens + (now - self._updated) * self.rate)
        self._updated = now

    async def acquire(self) -> None:
        """Wait for and consume one token."""
        async with self._lock:
            self._refill()
            while self._tokens < 1:
                wait = (1 - self._tokens) / self.rate
                await asyncio.sleep(wait)
                self._refill()
            self._tokens -= 1


class SlidingWindowRateLimiter:
    """
    Per-key request counter over a sliding time window.

    Keys idle for a whole window are dropped on the next sweep, which
    runs at most once per window.

    Attributes:
        limit: Requests allowed per window
        window_seconds: Window length
    """

    def __init__(self, limit: int, window_seconds: float) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._hits: dict[str, deque[float]] = {}
        self._last_sweep = 0.0

    def _sweep(self, now: float) -> None:
        idle = [
            key for key, hits in self._hits.items()
            if not hits or now - hits[-1] >= self.window_seconds
        ]
        for key in idle:
            del self._hits[key]
        self._last_sweep = now

    def check(self, key: str) -> None:
        """
        Record a request for key or reject it.

        Args:
            key: Identity (or identity + action) being limited

        Raises:
            RateLimitError: If the key already used its allowance in the window
        """
        now = time.monotonic()
        if now - self._last_sweep >= self.window_seconds:
            self._sweep(now)
        hits = self._hits.setdefault(key, deque())
        while hits and now - hits[0] >= self.window_seconds:
            hits.popleft()
        if len(hits) >= self.limit:
            retry_after = self.window_seconds - (now - hits[0])
            logger.warning(f"Rate limit hit for {key}, retry after {retry_after:.1f}s")
            raise RateLimitError(retry_after=retry_after)
        hits.append(now)

    def reset(self, key: str | None = None) -> None:
        """Forget recorded requests for one key, or for all keys."""
        if key is None:
            self._hits.clear()
        else:
            self._hits.pop(key, None)
