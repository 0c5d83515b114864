"""Fixed-window request rate limiter.

Counts are held per process; they are neither shared across workers
nor persisted.
"""

import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from storefront.domain.exceptions import RateLimitError

logger = structlog.get_logger()


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimiter:
    """Limits each client key to ``max_requests`` per window.

    The first hit opens a window with a count of 1. A hit after the
    window's reset time restarts it with a count of 1. A hit once the
    count has reached the limit is rejected without being counted.
    """

    def __init__(
        self,
        window_seconds: float = 15 * 60,
        max_requests: int = 100,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize limiter.

        Args:
            window_seconds: Window length in seconds.
            max_requests: Requests allowed per window.
            clock: Returns the current time in seconds.
        """
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> None:
        """Record a request for a client key.

        Raises:
            RateLimitError: If the client has used up the current window.
        """
        with self._lock:
            now = self._clock()
            window = self._windows.get(key)

            if window is None or now > window.reset_at:
                self._windows[key] = _Window(count=1, reset_at=now + self.window_seconds)
                return

            if window.count >= self.max_requests:
                retry_after = max(1, math.ceil(window.reset_at - now))
                logger.warning("Rate limit exceeded", client=key, retry_after=retry_after)
                raise RateLimitError(retry_after)

            window.count += 1

    def reset(self) -> None:
        """Forget every client window."""
        with self._lock:
            self._windows.clear()
