"""
Image endpoints.

Serves the cached random image. Responses are marked uncacheable so
clients and proxies pick up a new image as soon as the cache has one.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse, Response
import structlog

from ...domain.image_cache.exceptions import (
    ImageCacheException,
    ImageCacheHTTPException,
)
from ...services.image_cache.artifact_cache import ArtifactCache
from ..dependencies import image_cache_provider

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["images"])

NO_STORE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
    "Surrogate-Control": "no-store",
}


@router.get("/randomimage")
async def random_image(cache: ArtifactCache = Depends(image_cache_provider)):
    """Return the current random image."""
    try:
        artifact = await cache.get()
    except ImageCacheException as e:
        logger.error("Image cache unavailable", error=e.message, error_code=e.error_code)
        raise ImageCacheHTTPException(e)
    except Exception as e:
        logger.exception("Failed to get image", error=str(e))
        return PlainTextResponse("Failed to get image", status_code=500)

    return Response(
        content=artifact.data,
        media_type=artifact.content_type,
        headers=NO_STORE_HEADERS,
    )
