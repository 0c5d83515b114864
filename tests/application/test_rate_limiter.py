"""Tests for the fixed-window rate limiter."""

import pytest

from storefront.application.rate_limiter import RateLimiter
from storefront.domain import RateLimitError


class FakeClock:
    """Manually advanced clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestRateLimiter:
    """Tests for RateLimiter."""

    def test_allows_up_to_limit(self) -> None:
        """Requests up to the limit pass; the next one fails."""
        clock = FakeClock()
        limiter = RateLimiter(window_seconds=60, max_requests=3, clock=clock)

        for _ in range(3):
            limiter.hit("1.2.3.4")
        with pytest.raises(RateLimitError) as exc_info:
            limiter.hit("1.2.3.4")
        assert exc_info.value.retry_after_seconds == 60

    def test_keys_are_independent(self) -> None:
        """Each client has its own window."""
        limiter = RateLimiter(window_seconds=60, max_requests=1, clock=FakeClock())
        limiter.hit("a")
        limiter.hit("b")
        with pytest.raises(RateLimitError):
            limiter.hit("a")

    def test_window_resets(self) -> None:
        """A hit after the window closes starts a new one."""
        clock = FakeClock()
        limiter = RateLimiter(window_seconds=60, max_requests=1, clock=clock)
        limiter.hit("a")

        clock.now += 30
        with pytest.raises(RateLimitError) as exc_info:
            limiter.hit("a")
        assert exc_info.value.retry_after_seconds == 30

        clock.now += 31
        limiter.hit("a")

    def test_rejected_hits_are_not_counted(self) -> None:
        """Rejections do not extend the window."""
        clock = FakeClock()
        limiter = RateLimiter(window_seconds=10, max_requests=1, clock=clock)
        limiter.hit("a")
        for _ in range(5):
            with pytest.raises(RateLimitError):
                limiter.hit("a")
        clock.now += 11
        limiter.hit("a")

    def test_reset(self) -> None:
        """Reset forgets every window."""
        limiter = RateLimiter(window_seconds=60, max_requests=1, clock=FakeClock())
        limiter.hit("a")
        limiter.reset()
        limiter.hit("a")
