"""
Unit tests for FileArtifactPersister.

Uses pytest's tmp_path for an isolated directory.
"""

import pytest

from image_service.domain.image_cache.entities import Artifact
from image_service.domain.image_cache.exceptions import PersistFailure
from image_service.infrastructure.persistence import FileArtifactPersister


class TestFileArtifactPersister:
    """Test FileArtifactPersister."""

    @pytest.mark.asyncio
    async def test_load_missing_file_returns_none(self, tmp_path):
        """Test a missing file means nothing is persisted."""
        persister = FileArtifactPersister(tmp_path / "image.jpg")

        assert await persister.load() is None

    @pytest.mark.asyncio
    async def test_save_then_load(self, tmp_path):
        """Test a saved image is loaded back byte for byte."""
        path = tmp_path / "files" / "image.jpg"
        persister = FileArtifactPersister(path)

        await persister.save(Artifact.create(b"\xff\xd8image"))
        loaded = await persister.load()

        assert path.read_bytes() == b"\xff\xd8image"
        assert loaded.data == b"\xff\xd8image"
        assert loaded.content_type == "image/jpeg"
        assert loaded.obtained_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_save_replaces_previous_image(self, tmp_path):
        path = tmp_path / "image.jpg"
        persister = FileArtifactPersister(path)

        await persister.save(Artifact.create(b"first"))
        await persister.save(Artifact.create(b"second"))

        assert path.read_bytes() == b"second"
        assert [p.name for p in tmp_path.iterdir()] == ["image.jpg"]

    @pytest.mark.asyncio
    async def test_empty_file_treated_as_missing(self, tmp_path):
        path = tmp_path / "image.jpg"
        path.write_bytes(b"")

        assert await FileArtifactPersister(path).load() is None

    @pytest.mark.asyncio
    async def test_unreadable_path_raises_persist_failure(self, tmp_path):
        """Test a directory at the image path is a load failure."""
        path = tmp_path / "image.jpg"
        path.mkdir()

        with pytest.raises(PersistFailure) as exc_info:
            await FileArtifactPersister(path).load()

        assert exc_info.value.details["operation"] == "load"

    @pytest.mark.asyncio
    async def test_unwritable_path_raises_persist_failure(self, tmp_path):
        """Test a file where the parent directory should be is a save failure."""
        blocker = tmp_path / "files"
        blocker.write_bytes(b"not a directory")
        persister = FileArtifactPersister(blocker / "image.jpg")

        with pytest.raises(PersistFailure) as exc_info:
            await persister.save(Artifact.create(b"data"))

        assert exc_info.value.details["operation"] == "save"
        assert exc_info.value.details["path"] == str(blocker / "image.jpg")
