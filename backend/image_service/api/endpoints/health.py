"""
Health check endpoints for the random image service.

Reports service identity and a read-only snapshot of the image cache.
Nothing here mutates cache state.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from typing import Dict, Any
from datetime import datetime, timezone
import socket

from ...core.config import Settings
from ..dependencies import settings_provider

router = APIRouter(prefix="/health", tags=["health"])


def _service_info(settings: Settings) -> Dict[str, Any]:
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "environment": settings.ENVIRONMENT,
        "hostname": socket.gethostname(),
    }


@router.get("")
async def health_check(
    request: Request, settings: Settings = Depends(settings_provider)
) -> Dict[str, Any]:
    """
    Basic health check endpoint.

    Includes the cache countdown and refresh state when the cache is up.
    """
    cache = getattr(request.app.state, "image_cache", None)
    return {
        "status": "healthy",
        **_service_info(settings),
        "image_cache": cache.status() if cache is not None else None,
    }


@router.get("/ready")
async def readiness_check(
    request: Request, settings: Settings = Depends(settings_provider)
):
    """
    Readiness check endpoint.

    Ready once cold start has produced an image to serve.
    """
    cache = getattr(request.app.state, "image_cache", None)
    ready = cache is not None and cache.initialized
    body = {"status": "ready" if ready else "not_ready", **_service_info(settings)}
    return JSONResponse(status_code=200 if ready else 503, content=body)
