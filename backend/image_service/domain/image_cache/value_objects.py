"""
Image Cache Value Objects

Immutable value objects for the image cache domain.
Provides the freshness window and the serve-policy state table.
"""

from dataclasses import dataclass
from enum import Enum


class ServeState(str, Enum):
    """Read policy states of the artifact cache.

    Derived on every read from window expiry, the stale grant flag,
    and whether a refresh is in flight.
    """

    FRESH = "fresh"  # Window open, serve held artifact
    STALE_FIRST = "stale_first"  # Serve stale once, refresh in background
    STALE_AWAIT = "stale_await"  # Join the in-flight refresh
    STALE_REARM = "stale_rearm"  # Grant used, nothing in flight: refresh inline


def resolve_serve_state(
    expired: bool, stale_grant_issued: bool, refresh_in_flight: bool
) -> ServeState:
    """Map cache flags to the read policy state."""
    if not expired:
        return ServeState.FRESH
    if not stale_grant_issued:
        return ServeState.STALE_FIRST
    if refresh_in_flight:
        return ServeState.STALE_AWAIT
    return ServeState.STALE_REARM


@dataclass(frozen=True)
class WindowDuration:
    """
    Freshness window value object.

    Length of time an artifact is served before it is considered stale.
    """

    total_seconds: float

    def __post_init__(self) -> None:
        """Validate window length."""
        if self.total_seconds <= 0:
            raise ValueError("Window duration must be positive")
        if self.total_seconds > 86400:  # Max 1 day
            raise ValueError("Window duration too large (max 1 day)")

    @classmethod
    def of_seconds(cls, seconds: float) -> "WindowDuration":
        """Create window from seconds."""
        return cls(float(seconds))

    @classmethod
    def of_minutes(cls, minutes: float) -> "WindowDuration":
        """Create window from minutes."""
        return cls(float(minutes) * 60)

    @classmethod
    def default(cls) -> "WindowDuration":
        """Default image window (10 minutes)."""
        return cls.of_minutes(10)

    def __str__(self) -> str:
        return f"{self.total_seconds:g}s"
