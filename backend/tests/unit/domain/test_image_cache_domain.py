"""
Unit tests for Image Cache Domain Models.

Tests the artifact entity, value objects, serve-state table,
and exception details.
"""

import pytest
from datetime import datetime, timezone

from image_service.domain.image_cache.entities import Artifact
from image_service.domain.image_cache.exceptions import (
    ColdStartFailure,
    PersistFailure,
    RefreshFailure,
    ArtifactUnavailableError,
)
from image_service.domain.image_cache.value_objects import (
    ServeState,
    WindowDuration,
    resolve_serve_state,
)


class TestArtifact:
    """Test Artifact entity."""

    def test_create_stamps_current_time(self):
        """Test artifact creation records when it was obtained."""
        before = datetime.now(timezone.utc)
        artifact = Artifact.create(b"\xff\xd8jpeg")

        assert artifact.data == b"\xff\xd8jpeg"
        assert artifact.content_type == "image/jpeg"
        assert artifact.size_bytes == 6
        assert artifact.obtained_at >= before

    def test_create_accepts_bytearray(self):
        """Test bytearray payloads are frozen into bytes."""
        artifact = Artifact.create(bytearray(b"abc"), content_type="image/png")

        assert isinstance(artifact.data, bytes)
        assert artifact.content_type == "image/png"

    def test_empty_payload_rejected(self):
        """Test empty image payload is invalid."""
        with pytest.raises(ValueError, match="cannot be empty"):
            Artifact.create(b"")

    def test_non_bytes_rejected(self):
        """Test non-bytes payload is invalid."""
        with pytest.raises(TypeError, match="must be bytes"):
            Artifact(data="text", obtained_at=datetime.now(timezone.utc))

    def test_artifact_is_immutable(self):
        """Test artifacts cannot be mutated in place."""
        artifact = Artifact.create(b"abc")

        with pytest.raises(AttributeError):
            artifact.data = b"other"

    def test_repr_omits_payload(self):
        """Test repr stays short for large images."""
        artifact = Artifact.create(b"x" * 10_000)

        assert "size_bytes=10000" in repr(artifact)
        assert "xxxx" not in repr(artifact)


class TestWindowDuration:
    """Test WindowDuration value object."""

    def test_default_is_ten_minutes(self):
        assert WindowDuration.default().total_seconds == 600

    def test_from_minutes(self):
        assert WindowDuration.of_minutes(2).total_seconds == 120

    def test_from_seconds(self):
        window = WindowDuration.of_seconds(1.5)
        assert window.total_seconds == 1.5
        assert str(window) == "1.5s"

    def test_invalid_non_positive(self):
        with pytest.raises(ValueError, match="must be positive"):
            WindowDuration.of_seconds(0)

    def test_invalid_too_large(self):
        with pytest.raises(ValueError, match="too large"):
            WindowDuration.of_seconds(86401)


class TestServeState:
    """Test the read policy state table."""

    @pytest.mark.parametrize("grant", [False, True])
    @pytest.mark.parametrize("in_flight", [False, True])
    def test_fresh_whenever_window_open(self, grant, in_flight):
        assert resolve_serve_state(False, grant, in_flight) is ServeState.FRESH

    def test_first_stale_read(self):
        assert resolve_serve_state(True, False, False) is ServeState.STALE_FIRST

    def test_stale_with_refresh_in_flight(self):
        assert resolve_serve_state(True, True, True) is ServeState.STALE_AWAIT

    def test_stale_grant_used_without_refresh(self):
        assert resolve_serve_state(True, True, False) is ServeState.STALE_REARM


class TestExceptions:
    """Test image cache exception details."""

    def test_cold_start_failure_chains_cause(self):
        cause = RefreshFailure(message="boom")
        error = ColdStartFailure(original_error=cause)

        assert error.error_code == "COLD_START_FAILURE"
        assert error.__cause__ is cause
        assert error.details["original_error_type"] == "RefreshFailure"

    def test_refresh_failure_details(self):
        error = RefreshFailure(
            message="bad status", source="https://images.test", status_code=502
        )

        assert error.error_code == "REFRESH_FAILURE"
        assert error.details == {"source": "https://images.test", "status_code": 502}

    def test_persist_failure_details(self):
        error = PersistFailure(
            operation="save", path="/data/image.jpg", original_error=OSError("disk full")
        )

        assert error.message == "Image persist operation 'save' failed"
        assert error.details["path"] == "/data/image.jpg"
        assert error.details["original_error"] == "disk full"

    def test_unavailable_error(self):
        error = ArtifactUnavailableError()
        assert error.error_code == "ARTIFACT_UNAVAILABLE"
