"""
Cold start of the image cache.

Obtains the first artifact before the cache accepts reads: the persisted
copy when one exists, otherwise one synchronous upstream fetch.
"""

from dataclasses import dataclass
from typing import Literal, Optional

import structlog

from ...domain.image_cache.entities import Artifact
from ...domain.image_cache.exceptions import ColdStartFailure
from ...domain.image_cache.repository_interfaces import (
    ArtifactFetcher,
    ArtifactPersister,
)
from .single_flight import SingleFlightRefresher

logger = structlog.get_logger(__name__)

ColdStartSource = Literal["persisted", "fetched"]


@dataclass(frozen=True)
class ColdStartResult:
    """Artifact obtained at startup and where it came from."""

    artifact: Artifact
    source: ColdStartSource


class ColdStartLoader:
    """
    Loads the initial artifact for an ArtifactCache.

    A persisted artifact is adopted as if just fetched; its true age is
    not known.
    """

    def __init__(
        self,
        fetcher: ArtifactFetcher,
        persister: ArtifactPersister,
        refresher: SingleFlightRefresher,
    ):
        self.fetcher = fetcher
        self.persister = persister
        self.refresher = refresher

    async def load(self) -> ColdStartResult:
        """
        Obtain the initial artifact.

        Returns:
            ColdStartResult with the artifact and its source

        Raises:
            ColdStartFailure: If neither the persister nor the fetcher
                produced an artifact
        """
        artifact = await self._load_persisted()
        if artifact is not None:
            logger.info(
                "Cold start from persisted image",
                size_bytes=artifact.size_bytes,
                obtained_at=artifact.obtained_at.isoformat(),
            )
            return ColdStartResult(artifact=artifact, source="persisted")

        handle = self.refresher.run(self.fetcher.fetch)
        try:
            artifact = await handle.wait()
        except Exception as e:
            logger.error(
                "Cold start fetch failed, no image available",
                operation_id=str(handle.operation_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise ColdStartFailure(
                message=f"Cold start failed: no persisted image and fetch failed: {e}",
                original_error=e,
            ) from e

        logger.info("Cold start from upstream fetch", size_bytes=artifact.size_bytes)
        return ColdStartResult(artifact=artifact, source="fetched")

    async def _load_persisted(self) -> Optional[Artifact]:
        try:
            return await self.persister.load()
        except Exception as e:
            logger.warning(
                "Failed to load persisted image, falling back to fetch",
                error=str(e),
                error_type=type(e).__name__,
            )
            return None
