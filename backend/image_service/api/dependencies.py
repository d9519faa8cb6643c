"""FastAPI dependency providers for the image service."""

from fastapi import Request

from ..core.config import Settings, get_settings
from ..domain.image_cache.exceptions import (
    ArtifactUnavailableError,
    ImageCacheHTTPException,
)
from ..services.image_cache.artifact_cache import ArtifactCache


def image_cache_provider(request: Request) -> ArtifactCache:
    """Provide the process-wide ArtifactCache built in the app lifespan.

    Raises:
        ImageCacheHTTPException: 503 if the cache has not been set up
    """
    cache = getattr(request.app.state, "image_cache", None)
    if cache is None:
        raise ImageCacheHTTPException(ArtifactUnavailableError())
    return cache


def settings_provider() -> Settings:
    return get_settings()
