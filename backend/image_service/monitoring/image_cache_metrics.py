"""
Image Cache Metrics

Prometheus metrics for the artifact cache read policy, refreshes,
and persistence. Each collector owns its registry so several caches
(tests, multiple apps) never collide on metric names.
"""

from typing import Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

from ..domain.image_cache.value_objects import ServeState


class ImageCacheMetrics:
    """Prometheus collectors for one ArtifactCache."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()

        self.reads_total = Counter(
            "image_cache_reads_total",
            "Cache reads by serve state",
            ["state"],
            registry=self.registry,
        )
        self.refreshes_total = Counter(
            "image_cache_refreshes_total",
            "Completed refresh operations by outcome",
            ["outcome"],
            registry=self.registry,
        )
        self.refresh_duration_seconds = Histogram(
            "image_cache_refresh_duration_seconds",
            "Upstream fetch duration of refresh operations",
            buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
            registry=self.registry,
        )
        self.persist_failures_total = Counter(
            "image_cache_persist_failures_total",
            "Failed attempts to persist the cached image",
            registry=self.registry,
        )
        self.window_remaining_seconds = Gauge(
            "image_cache_window_remaining_seconds",
            "Seconds left in the freshness window at the last read",
            registry=self.registry,
        )
        self.artifact_size_bytes = Gauge(
            "image_cache_artifact_size_bytes",
            "Size of the currently served image",
            registry=self.registry,
        )

    def record_read(self, state: ServeState, window_remaining: float) -> None:
        self.reads_total.labels(state=state.value).inc()
        self.window_remaining_seconds.set(window_remaining)

    def record_refresh(self, success: bool, duration_seconds: float) -> None:
        outcome = "success" if success else "failure"
        self.refreshes_total.labels(outcome=outcome).inc()
        self.refresh_duration_seconds.observe(duration_seconds)

    def record_persist_failure(self) -> None:
        self.persist_failures_total.inc()

    def record_artifact(self, size_bytes: int) -> None:
        self.artifact_size_bytes.set(size_bytes)

    def export(self) -> bytes:
        """Prometheus text exposition of this registry."""
        return generate_latest(self.registry)
