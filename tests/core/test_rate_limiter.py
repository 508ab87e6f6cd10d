"""
Tests for token bucket pacing and sliding window request limits.
"""

import time
from unittest.mock import patch

import pytest

from curriculum_rag.core.exceptions import RateLimitError
from curriculum_rag.core.rate_limiter import SlidingWindowRateLimiter, TokenBucketRateLimiter


class TestTokenBucket:
    @pytest.mark.asyncio
    async def test_burst_is_immediate(self) -> None:
        limiter = TokenBucketRateLimiter(rate=1.0, capacity=3)

        started = time.monotonic()
        for _ in range(3):
            await limiter.acquire()

        assert time.monotonic() - started < 0.5

    @pytest.mark.asyncio
    async def test_waits_for_refill(self) -> None:
        limiter = TokenBucketRateLimiter(rate=20.0, capacity=1)

        started = time.monotonic()
        for _ in range(3):
            await limiter.acquire()

        assert time.monotonic() - started >= 0.09

    def test_invalid_parameters(self) -> None:
        with pytest.raises(ValueError):
            TokenBucketRateLimiter(rate=0)
        with pytest.raises(ValueError):
            TokenBucketRateLimiter(rate=1, capacity=0)


class TestSlidingWindow:
    def test_rejects_after_limit(self) -> None:
        limiter = SlidingWindowRateLimiter(limit=2, window_seconds=60)
        limiter.check("learner")
        limiter.check("learner")

        with pytest.raises(RateLimitError) as exc_info:
            limiter.check("learner")
        assert exc_info.value.retry_after > 0

    def test_keys_are_independent(self) -> None:
        limiter = SlidingWindowRateLimiter(limit=1, window_seconds=60)
        limiter.check("a")
        limiter.check("b")

    def test_window_slides(self) -> None:
        limiter = SlidingWindowRateLimiter(limit=1, window_seconds=10)
        with patch("curriculum_rag.core.rate_limiter.time.monotonic", return_value=100.0):
            limiter.check("learner")
        with patch("curriculum_rag.core.rate_limiter.time.monotonic", return_value=110.5):
            limiter.check("learner")

    def test_reset(self) -> None:
        limiter = SlidingWindowRateLimiter(limit=1, window_seconds=60)
        limiter.check("learner")
        limiter.reset("learner")
        limiter.check("learner")

    def test_idle_keys_evicted(self) -> None:
        limiter = SlidingWindowRateLimiter(limit=1, window_seconds=10)
        with patch("curriculum_rag.core.rate_limiter.time.monotonic", return_value=100.0):
            limiter.check("a")
        with patch("curriculum_rag.core.rate_limiter.time.monotonic", return_value=105.0):
            limiter.check("b")
        with patch("curriculum_rag.core.rate_limiter.time.monotonic", return_value=112.0):
            limiter.check("c")

        assert set(limiter._hits) == {"b", "c"}
