"""
Artifact Cache

Time-windowed cache of a single image with bounded stale serving and
single-flight refresh. Expiry is detected lazily on read; there is no
background scheduler.

Read policy:
- FRESH: serve the held image
- STALE_FIRST: serve the held image once, refresh in the background
- STALE_AWAIT: wait for the in-flight refresh, serve its image
- STALE_REARM: stale grant used and nothing in flight, refresh inline
"""

import asyncio
import time
from typing import Any, Dict, Optional, Set

import structlog
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from ...domain.image_cache.entities import Artifact
from ...domain.image_cache.exceptions import ArtifactUnavailableError
from ...domain.image_cache.repository_interfaces import (
    ArtifactFetcher,
    ArtifactPersister,
    Clock,
)
from ...domain.image_cache.value_objects import (
    ServeState,
    WindowDuration,
    resolve_serve_state,
)
from ...monitoring.image_cache_metrics import ImageCacheMetrics
from .cold_start import ColdStartLoader
from .single_flight import RefreshHandle, SingleFlightRefresher
from .window_timer import WindowTimer

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)


class ArtifactCache:
    """
    Single-artifact cache with stale-while-revalidate reads.

    All mutations of the held artifact, the window, and the stale grant
    happen under one lock that is never held across the upstream fetch.
    Once initialize() has succeeded, get() never raises.
    """

    def __init__(
        self,
        fetcher: ArtifactFetcher,
        persister: ArtifactPersister,
        clock: Clock,
        window: Optional[WindowDuration] = None,
        metrics: Optional[ImageCacheMetrics] = None,
    ):
        self.fetcher = fetcher
        self.persister = persister
        self.window = WindowTimer(window or WindowDuration.default(), clock)
        self.refresher = SingleFlightRefresher()
        self.metrics = metrics or ImageCacheMetrics()

        self._artifact: Optional[Artifact] = None
        self._stale_grant_issued = False
        self._lock = asyncio.Lock()
        self._persist_lock = asyncio.Lock()
        self._persist_tasks: Set[asyncio.Task] = set()

    @classmethod
    async def create(
        cls,
        fetcher: ArtifactFetcher,
        persister: ArtifactPersister,
        clock: Clock,
        window: Optional[WindowDuration] = None,
        metrics: Optional[ImageCacheMetrics] = None,
    ) -> "ArtifactCache":
        """Construct a cache and run its cold start.

        Raises:
            ColdStartFailure: If no initial image could be obtained
        """
        cache = cls(fetcher, persister, clock, window=window, metrics=metrics)
        await cache.initialize()
        return cache

    @property
    def initialized(self) -> bool:
        return self._artifact is not None

    @property
    def stale_grant_issued(self) -> bool:
        return self._stale_grant_issued

    async def initialize(self) -> None:
        """
        Obtain the initial image and open the first window.

        Raises:
            ColdStartFailure: If no initial image could be obtained
        """
        if self._artifact is not None:
            return

        loader = ColdStartLoader(self.fetcher, self.persister, self.refresher)
        result = await loader.load()

        async with self._lock:
            self._artifact = result.artifact
            self._stale_grant_issued = False
            self.window.start()
            if result.source == "fetched":
                self._schedule_persist(result.artifact)

        self.metrics.record_artifact(result.artifact.size_bytes)
        logger.info(
            "Image cache initialized",
            source=result.source,
            window=str(self.window.duration),
        )

    async def get(self) -> Artifact:
        """
        Read the cached image according to the read policy.

        Returns:
            The image to serve; possibly stale if refreshes keep failing

        Raises:
            ArtifactUnavailableError: If called before initialize()
        """
        with tracer.start_as_current_span("image_cache.get") as span:
            handle: Optional[RefreshHandle] = None

            async with self._lock:
                if self._artifact is None:
                    raise ArtifactUnavailableError()

                state = resolve_serve_state(
                    expired=self.window.is_expired(),
                    stale_grant_issued=self._stale_grant_issued,
                    refresh_in_flight=self.refresher.in_flight is not None,
                )
                held = self._artifact

                if state is ServeState.STALE_FIRST:
                    self._stale_grant_issued = True
                    handle = self.refresher.run(self._refresh)
                elif state in (ServeState.STALE_AWAIT, ServeState.STALE_REARM):
                    # Joins the in-flight refresh or starts a new one.
                    handle = self.refresher.run(self._refresh)

                remaining = self.window.remaining()

            span.set_attribute("image_cache.state", state.value)
            self.metrics.record_read(state, remaining)
            logger.debug(
                "Image cache read",
                state=state.value,
                window_remaining=self.window.formatted_remaining(),
                operation_id=str(handle.operation_id) if handle else None,
            )

            if state in (ServeState.FRESH, ServeState.STALE_FIRST):
                return held

            return await self._await_refresh(handle, span)

    async def _await_refresh(self, handle: RefreshHandle, span: Any) -> Artifact:
        try:
            return await handle.wait()
        except Exception as e:
            # Already logged and counted by the refresh itself.
            span.set_attribute("image_cache.served_stale_after_failure", True)
            logger.warning(
                "Serving stale image after failed refresh",
                operation_id=str(handle.operation_id),
                error=str(e),
            )
            return self._artifact

    async def _refresh(self) -> Artifact:
        """Fetch a new image and install it. Runs inside the refresher."""
        with tracer.start_as_current_span("image_cache.refresh") as span:
            started = time.perf_counter()
            try:
                artifact = await self.fetcher.fetch()
            except Exception as e:
                self.metrics.record_refresh(False, time.perf_counter() - started)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                logger.error(
                    "Failed to refresh image, keeping previous image",
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise

            async with self._lock:
                self._artifact = artifact
                self._schedule_persist(artifact)
                self.window.restart()
                self._stale_grant_issued = False

            duration = time.perf_counter() - started
            self.metrics.record_refresh(True, duration)
            self.metrics.record_artifact(artifact.size_bytes)
            span.set_attribute("image_cache.size_bytes", artifact.size_bytes)
            logger.info(
                "Image refreshed",
                size_bytes=artifact.size_bytes,
                duration_ms=round(duration * 1000, 1),
            )
            return artifact

    def _schedule_persist(self, artifact: Artifact) -> None:
        task = asyncio.get_running_loop().create_task(self._persist(artifact))
        self._persist_tasks.add(task)
        task.add_done_callback(self._persist_tasks.discard)

    async def _persist(self, artifact: Artifact) -> None:
        async with self._persist_lock:
            if artifact is not self._artifact:
                # Superseded by a newer refresh; its own persist will run.
                return
            try:
                await self.persister.save(artifact)
                logger.debug("Image persisted", size_bytes=artifact.size_bytes)
            except Exception as e:
                self.metrics.record_persist_failure()
                logger.warning(
                    "Failed to persist image, keeping it in memory",
                    error=str(e),
                    error_type=type(e).__name__,
                )

    def status(self) -> Dict[str, Any]:
        """Read-only snapshot of the cache state for health reporting."""
        artifact = self._artifact
        in_flight = self.refresher.in_flight
        state = resolve_serve_state(
            expired=self.window.is_expired(),
            stale_grant_issued=self._stale_grant_issued,
            refresh_in_flight=in_flight is not None,
        )
        return {
            "initialized": artifact is not None,
            "state": state.value,
            "window_seconds": self.window.duration.total_seconds,
            "window_remaining": self.window.formatted_remaining(),
            "window_remaining_seconds": round(self.window.remaining(), 3),
            "stale_grant_issued": self._stale_grant_issued,
            "refresh_in_flight": in_flight is not None,
            "artifact": {
                "size_bytes": artifact.size_bytes,
                "content_type": artifact.content_type,
                "obtained_at": artifact.obtained_at.isoformat(),
            }
            if artifact
            else None,
        }

    async def aclose(self) -> None:
        """Let the in-flight refresh and pending persists finish."""
        await self.refresher.aclose()
        if self._persist_tasks:
            await asyncio.gather(*list(self._persist_tasks), return_exceptions=True)
        logger.info("Image cache closed")
