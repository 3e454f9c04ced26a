"""Per-key sliding window rate limiting for high-volume client endpoints."""

import time
from collections import deque
from typing import Callable, Hashable


class SlidingWindowRateLimiter:
    """Allow at most ``max_events`` per key within the last ``window_seconds``.

    Owned by whoever creates it (the app keeps one on ``app.state``) so
    tests can build their own with a fake clock.
    """

    def __init__(
        self,
        max_events: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_events < 1:
            raise ValueError("max_events must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_events = max_events
        self.window_seconds = window_seconds
        self._clock = clock
        self._events: dict[Hashable, deque[float]] = {}

    def _prune(self, key: Hashable, now: float) -> deque[float]:
        bucket = self._events.get(key)
        if bucket is None:
            bucket = self._events[key] = deque()
        threshold = now - self.window_seconds
        while bucket and bucket[0] < threshold:
            bucket.popleft()
        return bucket

    def hit(self, key: Hashable) -> bool:
        """Record an event for ``key`` if allowed.

        Returns:
            True if the event was accepted, False if the key is over its limit.
            Rejected events are not recorded.
        """
        now = self._clock()
        bucket = self._prune(key, now)
        if len(bucket) >= self.max_events:
            return False
        bucket.append(now)
        return True

    def remaining(self, key: Hashable) -> int:
        """Events ``key`` may still send in the current window."""
        bucket = self._prune(key, self._clock())
        return max(0, self.max_events - len(bucket))

    def reset(self, key: Hashable | None = None) -> None:
        """Forget recorded events for one key, or for all keys."""
        if key is None:
            self._events.clear()
        else:
            self._events.pop(key, None)
