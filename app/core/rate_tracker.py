"""Moving-window submission counters backing the adaptive rate limit."""

import math
import time
from typing import Protocol

from limits import RateLimitItemPerSecond
from limits.storage import storage_from_string
from limits.strategies import MovingWindowRateLimiter

# Hits are tracked against a fixed ceiling so the count for a key survives a
# change of the user's adaptive limit.
TRACKED_CEILING = 1000


class RateTracker(Protocol):
    def usage(self, key: str, window_seconds: int) -> tuple[int, int]:
        """Return the hits for `key` within the window and the seconds until the oldest one expires."""
        ...

    def record(self, key: str, window_seconds: int) -> None:
        """Count one accepted hit for `key`."""
        ...


class LimitsRateTracker:
    """
    RateTracker over a `limits` storage backend.

    `memory://` keeps counters in the process; a `redis://` URI shares them
    between workers (requires the `redis` client).
    """

    def __init__(self, storage_uri: str = "memory://"):
        self.storage = storage_from_string(storage_uri)
        self.limiter = MovingWindowRateLimiter(self.storage)

    @staticmethod
    def _item(window_seconds: int) -> RateLimitItemPerSecond:
        return RateLimitItemPerSecond(TRACKED_CEILING, window_seconds)

    def usage(self, key: str, window_seconds: int) -> tuple[int, int]:
        stats = self.limiter.get_window_stats(self._item(window_seconds), key)
        hits = TRACKED_CEILING - stats.remaining
        retry_after = max(1, math.ceil(stats.reset_time - time.time()))
        return hits, min(retry_after, window_seconds)

    def record(self, key: str, window_seconds: int) -> None:
        self.limiter.hit(self._item(window_seconds), key)

    def reset(self) -> None:
        self.storage.reset()
