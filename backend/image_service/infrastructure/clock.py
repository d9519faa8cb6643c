"""Monotonic clock used to measure freshness windows."""

import time

from ..domain.image_cache.repository_interfaces import Clock


class MonotonicClock(Clock):
    """Clock backed by time.monotonic(); immune to wall-clock adjustments."""

    def now(self) -> float:
        return time.monotonic()
