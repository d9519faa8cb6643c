"""
Single-flight refresh coordination.

At most one refresh operation exists at a time. Callers that arrive while
one is running join it instead of starting their own.
"""

import asyncio
from typing import Awaitable, Callable, Optional
from uuid import UUID, uuid4

import structlog

from ...domain.image_cache.entities import Artifact

logger = structlog.get_logger(__name__)

FetchFn = Callable[[], Awaitable[Artifact]]


class RefreshHandle:
    """
    Shared handle to one refresh operation.

    Any number of callers may wait on it; all observe the same result.
    """

    def __init__(self) -> None:
        self.operation_id: UUID = uuid4()
        self._task: Optional["asyncio.Task[Artifact]"] = None

    def _bind(self, task: "asyncio.Task[Artifact]") -> None:
        self._task = task

    def done(self) -> bool:
        return self._task is not None and self._task.done()

    async def wait(self) -> Artifact:
        """
        Wait for the operation to settle.

        Returns:
            The artifact produced by the operation

        Raises:
            Exception: The operation's failure, re-raised to every waiter
        """
        # Shielded so a cancelled waiter never cancels the shared operation.
        return await asyncio.shield(self._task)

    def __repr__(self) -> str:
        return f"RefreshHandle(operation_id={self.operation_id}, done={self.done()})"


class SingleFlightRefresher:
    """
    Runs at most one refresh operation at a time.

    run() has no suspension point, so on a single event loop concurrent
    callers can never start two operations.
    """

    def __init__(self) -> None:
        self._in_flight: Optional[RefreshHandle] = None

    @property
    def in_flight(self) -> Optional[RefreshHandle]:
        """Current operation handle, or None when idle."""
        return self._in_flight

    def run(self, fetch_fn: FetchFn) -> RefreshHandle:
        """
        Start an operation, or return the one already in flight.

        Args:
            fetch_fn: Coroutine function producing the new artifact.
                Not called when an operation is already in flight.

        Returns:
            Handle to the running operation
        """
        if self._in_flight is not None:
            logger.debug(
                "Joining in-flight refresh",
                operation_id=str(self._in_flight.operation_id),
            )
            return self._in_flight

        handle = RefreshHandle()
        task = asyncio.get_running_loop().create_task(
            self._execute(handle, fetch_fn),
            name=f"image-refresh-{handle.operation_id}",
        )
        task.add_done_callback(self._retrieve_exception)
        handle._bind(task)
        self._in_flight = handle

        logger.debug("Refresh started", operation_id=str(handle.operation_id))
        return handle

    async def _execute(self, handle: RefreshHandle, fetch_fn: FetchFn) -> Artifact:
        try:
            return await fetch_fn()
        finally:
            # Cleared before the task settles, so no waiter wakes up
            # while the finished handle is still registered.
            if self._in_flight is handle:
                self._in_flight = None

    @staticmethod
    def _retrieve_exception(task: "asyncio.Task[Artifact]") -> None:
        # Marks the failure as retrieved for detached operations; waiters
        # still receive it through wait().
        if not task.cancelled():
            task.exception()

    async def aclose(self) -> None:
        """Wait for the in-flight operation, if any, to settle."""
        handle = self._in_flight
        if handle is None:
            return
        try:
            await handle.wait()
        except Exception as e:
            logger.debug(
                "In-flight refresh failed during shutdown",
                operation_id=str(handle.operation_id),
                error=str(e),
            )
