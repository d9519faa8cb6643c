"""
Image Cache Collaborator Interfaces

Abstract contracts for the collaborators the cache consumes: the
upstream fetcher, the cold-start persister, and the monotonic clock.
"""

from abc import ABC, abstractmethod
from typing import Optional

from .entities import Artifact


class ArtifactFetcher(ABC):
    """
    Produces a fresh artifact from the slow upstream source.

    May take arbitrarily long. Raises RefreshFailure on any failure.
    """

    @abstractmethod
    async def fetch(self) -> Artifact:
        """Fetch a fresh artifact."""
        pass


class ArtifactPersister(ABC):
    """
    Durable storage of the latest artifact for cold-start recovery.

    Both operations are best-effort from the cache's point of view.
    """

    @abstractmethod
    async def load(self) -> Optional[Artifact]:
        """Load the persisted artifact, or None if nothing is stored.

        Raises:
            PersistFailure: If stored data exists but cannot be read
        """
        pass

    @abstractmethod
    async def save(self, artifact: Artifact) -> None:
        """Persist the artifact, replacing any previous one.

        Raises:
            PersistFailure: If the artifact could not be written
        """
        pass


class Clock(ABC):
    """Monotonic time source, in seconds."""

    @abstractmethod
    def now(self) -> float:
        """Return the current monotonic instant."""
        pass
