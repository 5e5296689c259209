"""In-memory sliding-window rate limiting for the /api routes."""

from __future__ import annotations

import math
import time
from collections import deque
from typing import Callable, Deque, Dict, Tuple


class RateLimiter:
    """
    Simple in-memory rate limiter.

    Tracks request timestamps per identifier (client address) and rejects
    once max_requests have been seen within window_seconds.
    """

    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: float = 900.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize rate limiter.

        Args:
            max_requests: Requests allowed per window (default: 100)
            window_seconds: Window length in seconds (default: 900 = 15 minutes)
            clock: Monotonic time source, injectable for tests
        """
        self._hits: Dict[str, Deque[float]] = {}
        self._max_requests = max_requests
        self._window = window_seconds
        self._clock = clock
        self._last_sweep = clock()

    @property
    def max_requests(self) -> int:
        return self._max_requests

    def check_and_increment(self, identifier: str) -> Tuple[bool, int, int]:
        """
        Check if identifier is rate limited and record the request.

        Args:
            identifier: Unique identifier (client IP, etc.)

        Returns:
            Tuple of (is_allowed, remaining, retry_after_seconds)
            - is_allowed: True if the request should be served
            - remaining: Requests left in the current window
            - retry_after_seconds: Seconds until the oldest hit expires (0 when allowed)
        """
        now = self._clock()
        if now - self._last_sweep >= self._window:
            self._sweep(now)
        hits = self._hits.setdefault(identifier, deque())

        # Drop hits that fell out of the window
        while hits and now - hits[0] >= self._window:
            hits.popleft()

        if len(hits) >= self._max_requests:
            retry_after = max(1, math.ceil(self._window - (now - hits[0])))
            return False, 0, retry_after

        hits.append(now)
        return True, self._max_requests - len(hits), 0

    def _sweep(self, now: float) -> None:
        """Forget identifiers with no hits left inside the window."""
        idle = [key for key, hits in self._hits.items() if not hits or now - hits[-1] >= self._window]
        for key in idle:
            del self._hits[key]
        self._last_sweep = now

    def __len__(self) -> int:
        return len(self._hits)

    def reset(self, identifier: str | None = None) -> None:
        """
        Reset recorded hits for one identifier, or for everyone.

        Args:
            identifier: Identifier to reset; None clears all
        """
        if identifier is None:
            self._hits.clear()
        else:
            self._hits.pop(identifier, None)
