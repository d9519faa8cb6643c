"""
File Artifact Persister

Keeps the latest image as a plain file so a restarted process can serve
immediately. Writes go to a temporary sibling file that is then renamed
over the target, so readers never observe a partially written image.
"""

import asyncio
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

import structlog

from ...domain.image_cache.entities import Artifact, DEFAULT_CONTENT_TYPE
from ...domain.image_cache.exceptions import PersistFailure
from ...domain.image_cache.repository_interfaces import ArtifactPersister

logger = structlog.get_logger(__name__)


class FileArtifactPersister(ArtifactPersister):
    """Persists the artifact bytes to a single file."""

    def __init__(
        self, path: Union[str, Path], content_type: str = DEFAULT_CONTENT_TYPE
    ):
        self.path = Path(path)
        self.content_type = content_type

    async def load(self) -> Optional[Artifact]:
        try:
            return await asyncio.to_thread(self._read)
        except OSError as e:
            raise PersistFailure(
                operation="load", path=str(self.path), original_error=e
            ) from e

    async def save(self, artifact: Artifact) -> None:
        try:
            await asyncio.to_thread(self._write, artifact.data)
        except OSError as e:
            raise PersistFailure(
                operation="save", path=str(self.path), original_error=e
            ) from e

        logger.debug("Image written", path=str(self.path), size_bytes=artifact.size_bytes)

    def _read(self) -> Optional[Artifact]:
        try:
            data = self.path.read_bytes()
            mtime = self.path.stat().st_mtime
        except FileNotFoundError:
            return None

        if not data:
            logger.warning("Persisted image is empty, ignoring", path=str(self.path))
            return None

        return Artifact.create(
            data,
            content_type=self.content_type,
            obtained_at=datetime.fromtimestamp(mtime, tz=timezone.utc),
        )

    def _write(self, data: bytes) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
