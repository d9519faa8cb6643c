"""
Fixed-duration freshness window.

Expiry is a pure function of (now, start, duration); there is no
background tick, so correctness never depends on scheduling cadence.
"""

from typing import Optional

from ...domain.image_cache.repository_interfaces import Clock
from ...domain.image_cache.value_objects import WindowDuration


class WindowTimer:
    """
    Tracks elapsed and remaining time in a restartable window.

    A stopped (or never started) timer is never expired.
    """

    def __init__(self, duration: WindowDuration, clock: Clock):
        self.duration = duration
        self._clock = clock
        self._started_at: Optional[float] = None

    @property
    def is_running(self) -> bool:
        return self._started_at is not None

    def start(self) -> None:
        """Start the window. No-op if already running."""
        if self._started_at is not None:
            return
        self._started_at = self._clock.now()

    def stop(self) -> None:
        """Stop measuring. Remaining time is frozen at the full duration."""
        self._started_at = None

    def reset(self) -> None:
        """Stop and restore the full remaining time."""
        self.stop()

    def restart(self) -> None:
        """Begin a new window measured from now, whatever the current state."""
        # Single assignment replaces the start instant atomically.
        self._started_at = self._clock.now()

    def elapsed(self) -> float:
        """Seconds since the window started (0 when stopped)."""
        if self._started_at is None:
            return 0.0
        return max(0.0, self._clock.now() - self._started_at)

    def remaining(self) -> float:
        """Seconds left in the window, clamped at zero."""
        return max(0.0, self.duration.total_seconds - self.elapsed())

    def is_expired(self) -> bool:
        if self._started_at is None:
            return False
        return self.elapsed() >= self.duration.total_seconds

    def formatted_remaining(self) -> str:
        """Remaining time as MM:SS."""
        remaining = int(self.remaining())
        minutes, seconds = divmod(remaining, 60)
        return f"{minutes:02d}:{seconds:02d}"
