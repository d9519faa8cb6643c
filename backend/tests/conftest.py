"""
Main pytest configuration for backend tests.

Fixtures for the image cache and its collaborators.
"""

import os
import pytest
import pytest_asyncio

# Set test environment variables before importing app modules
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["IMAGE_SOURCE_URL"] = "https://images.test/random"

from image_service.domain.image_cache.value_objects import WindowDuration
from image_service.monitoring.image_cache_metrics import ImageCacheMetrics
from image_service.services.image_cache.artifact_cache import ArtifactCache
from tests.fixtures.image_cache_fakes import (
    InMemoryPersister,
    ManualClock,
    ScriptedFetcher,
    make_artifact,
)

WINDOW_MINUTES = 10


@pytest.fixture
def clock():
    """Manually advanced monotonic clock."""
    return ManualClock()


@pytest.fixture
def initial_artifact():
    """Image installed at cold start."""
    return make_artifact("A0")


@pytest.fixture
def fetcher():
    """Scripted upstream fetcher."""
    return ScriptedFetcher()


@pytest.fixture
def persister(initial_artifact):
    """Persister that already holds the initial image."""
    return InMemoryPersister(stored=initial_artifact)


@pytest.fixture
def window():
    """Ten minute freshness window."""
    return WindowDuration.of_minutes(WINDOW_MINUTES)


@pytest_asyncio.fixture
async def cache(fetcher, persister, clock, window):
    """Initialized cache serving the persisted initial image."""
    cache = await ArtifactCache.create(
        fetcher=fetcher,
        persister=persister,
        clock=clock,
        window=window,
        metrics=ImageCacheMetrics(),
    )
    yield cache
    fetcher.release()
    await cache.aclose()


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "api: marks tests as HTTP API tests")
