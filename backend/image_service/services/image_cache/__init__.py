"""
Image cache services.

This module provides:
- ArtifactCache: Windowed cache with stale-while-revalidate reads
- SingleFlightRefresher: At most one refresh in flight
- WindowTimer: Restartable freshness window
- ColdStartLoader: Initial image from disk or upstream
"""

from .artifact_cache import ArtifactCache
from .cold_start import ColdStartLoader, ColdStartResult
from .single_flight import RefreshHandle, SingleFlightRefresher
from .window_timer import WindowTimer

__all__ = [
    "ArtifactCache",
    "ColdStartLoader",
    "ColdStartResult",
    "RefreshHandle",
    "SingleFlightRefresher",
    "WindowTimer",
]
