"""Prometheus exposition of image cache metrics."""

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST

from ...services.image_cache.artifact_cache import ArtifactCache
from ..dependencies import image_cache_provider

router = APIRouter(tags=["monitoring"])


@router.get("/metrics")
async def metrics(cache: ArtifactCache = Depends(image_cache_provider)) -> Response:
    return Response(content=cache.metrics.export(), media_type=CONTENT_TYPE_LATEST)
