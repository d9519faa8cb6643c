"""
Test doubles for image cache collaborators.

Provides a manually advanced clock, a fetcher whose completion the test
controls, and an in-memory persister with injectable failures.
"""

import asyncio
from typing import List, Optional, Union

from image_service.domain.image_cache.entities import Artifact
from image_service.domain.image_cache.exceptions import PersistFailure, RefreshFailure
from image_service.domain.image_cache.repository_interfaces import (
    ArtifactFetcher,
    ArtifactPersister,
    Clock,
)

FetchOutcome = Union[Artifact, Exception]


def make_artifact(label: str) -> Artifact:
    """Artifact whose bytes identify it in assertions."""
    return Artifact.create(f"jpeg:{label}".encode())


class ManualClock(Clock):
    """Clock that only moves when the test advances it."""

    def __init__(self, start: float = 1000.0):
        self._now = start

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds

    def advance_minutes(self, minutes: float) -> None:
        self.advance(minutes * 60)


class ScriptedFetcher(ArtifactFetcher):
    """
    Fetcher returning scripted outcomes in order.

    When held, each fetch blocks until release() is called, so tests can
    observe the cache while a refresh is in flight.
    """

    def __init__(self, outcomes: Optional[List[FetchOutcome]] = None):
        self.outcomes: List[FetchOutcome] = list(outcomes or [])
        self.calls = 0
        self.started = asyncio.Event()
        self._gate: Optional[asyncio.Event] = None

    def hold(self) -> None:
        self._gate = asyncio.Event()

    def release(self) -> None:
        if self._gate is not None:
            self._gate.set()
            self._gate = None

    def script(self, *outcomes: FetchOutcome) -> None:
        self.outcomes.extend(outcomes)

    async def fetch(self) -> Artifact:
        self.calls += 1
        self.started.set()
        gate = self._gate
        if gate is not None:
            await gate.wait()

        if self.outcomes:
            outcome = self.outcomes.pop(0)
        else:
            outcome = make_artifact(f"auto-{self.calls}")

        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class InMemoryPersister(ArtifactPersister):
    """Persister keeping the artifact in memory."""

    def __init__(self, stored: Optional[Artifact] = None):
        self.stored = stored
        self.saved: List[Artifact] = []
        self.load_error: Optional[Exception] = None
        self.save_error: Optional[Exception] = None

    async def load(self) -> Optional[Artifact]:
        if self.load_error is not None:
            raise self.load_error
        return self.stored

    async def save(self, artifact: Artifact) -> None:
        if self.save_error is not None:
            raise self.save_error
        self.stored = artifact
        self.saved.append(artifact)


def fetch_failure(reason: str = "upstream unavailable") -> RefreshFailure:
    return RefreshFailure(message=reason, source="https://images.test/random")


def persist_failure(operation: str = "save") -> PersistFailure:
    return PersistFailure(operation=operation, path="/tmp/image.jpg")


async def settle(rounds: int = 10) -> None:
    """Let scheduled tasks (background refreshes, persists) run."""
    for _ in range(rounds):
        await asyncio.sleep(0)
