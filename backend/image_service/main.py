"""
Random Image Service - Main FastAPI Application

Serves a periodically refreshed random image:
- Image held in memory for a fixed window, refreshed lazily on read
- Stale image served once while a single background refresh runs
- Latest image persisted to disk for cold-start recovery
- Structured logging and Prometheus metrics
"""

from fastapi import FastAPI
from contextlib import asynccontextmanager
from typing import Optional
import structlog

from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .domain.image_cache.value_objects import WindowDuration
from .infrastructure.clock import MonotonicClock
from .infrastructure.fetchers import HttpImageFetcher
from .infrastructure.persistence import FileArtifactPersister
from .services.image_cache.artifact_cache import ArtifactCache
from .api.endpoints.health import router as health_router
from .api.endpoints.images import router as images_router
from .api.endpoints.metrics import router as metrics_router

logger = structlog.get_logger()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application for the given settings."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Build the image cache once; a failed cold start aborts startup."""
        logger.info(
            "Starting random image service",
            version=settings.SERVICE_VERSION,
            environment=settings.ENVIRONMENT,
            image_source=settings.image_source_url,
            window_seconds=settings.image_window_seconds,
        )

        fetcher = HttpImageFetcher.from_settings(settings)
        persister = FileArtifactPersister(settings.image_cache_path)

        try:
            app.state.image_cache = await ArtifactCache.create(
                fetcher=fetcher,
                persister=persister,
                clock=MonotonicClock(),
                window=WindowDuration.of_seconds(settings.image_window_seconds),
            )
        except Exception:
            logger.exception("Failed to initialize image cache")
            await fetcher.aclose()
            raise

        logger.info("Random image service started")

        yield

        logger.info("Shutting down random image service")
        try:
            await app.state.image_cache.aclose()
        except Exception as e:
            logger.error("Error during image cache shutdown", error=str(e))
        finally:
            await fetcher.aclose()
            app.state.image_cache = None

        logger.info("Application shutdown completed")

    app = FastAPI(
        title="Random Image Service",
        description="Serves a periodically refreshed random image",
        version=settings.SERVICE_VERSION,
        lifespan=lifespan,
    )

    app.include_router(images_router)
    app.include_router(health_router)
    app.include_router(metrics_router)

    return app


def run() -> None:
    """Run the service with uvicorn."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings)
    uvicorn.run(
        create_app(settings),
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_config=None,
    )


if __name__ == "__main__":
    run()
