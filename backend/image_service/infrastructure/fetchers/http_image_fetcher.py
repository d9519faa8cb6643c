"""
HTTP Image Fetcher

Downloads a random image from an upstream HTTP endpoint. The body is
streamed and joined into a single payload. Transport errors are retried;
every failure surfaces as RefreshFailure.
"""

from typing import Optional

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from ...core.config import Settings
from ...domain.image_cache.entities import Artifact, DEFAULT_CONTENT_TYPE
from ...domain.image_cache.exceptions import RefreshFailure
from ...domain.image_cache.repository_interfaces import ArtifactFetcher

logger = structlog.get_logger(__name__)


class HttpImageFetcher(ArtifactFetcher):
    """
    Fetches images over HTTP with httpx.

    The upstream typically redirects to the actual image, so redirects
    are followed.
    """

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 30.0,
        max_attempts: int = 2,
        retry_backoff_seconds: float = 0.5,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.url = url
        self.timeout_seconds = timeout_seconds
        self.max_attempts = max_attempts
        self.retry_backoff_seconds = retry_backoff_seconds
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout_seconds, follow_redirects=True
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "HttpImageFetcher":
        return cls(
            url=settings.image_source_url,
            timeout_seconds=settings.image_fetch_timeout_seconds,
            max_attempts=settings.image_fetch_max_attempts,
            retry_backoff_seconds=settings.image_fetch_retry_backoff_seconds,
        )

    async def fetch(self) -> Artifact:
        """
        Download one image.

        Returns:
            Artifact with the downloaded bytes

        Raises:
            RefreshFailure: On transport error, timeout, non-2xx status,
                or an empty body
        """
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=wait_exponential(multiplier=self.retry_backoff_seconds, max=10),
                retry=retry_if_exception_type(httpx.TransportError),
                before_sleep=lambda retry_state: logger.warning(
                    "Image fetch attempt failed, retrying",
                    attempt=retry_state.attempt_number,
                    url=self.url,
                ),
                reraise=True,
            ):
                with attempt:
                    return await self._download()
        except httpx.HTTPStatusError as e:
            raise RefreshFailure(
                message=f"Image source returned HTTP {e.response.status_code}",
                source=self.url,
                status_code=e.response.status_code,
                original_error=e,
            ) from e
        except httpx.HTTPError as e:
            raise RefreshFailure(
                message=f"Image download failed: {e}",
                source=self.url,
                original_error=e,
            ) from e

    async def _download(self) -> Artifact:
        async with self._client.stream("GET", self.url) as response:
            response.raise_for_status()
            chunks = [chunk async for chunk in response.aiter_bytes()]
            content_type = response.headers.get("content-type", DEFAULT_CONTENT_TYPE)

        data = b"".join(chunks)
        if not data:
            raise RefreshFailure(
                message="Image source returned an empty body", source=self.url
            )

        logger.debug(
            "Image downloaded",
            url=self.url,
            size_bytes=len(data),
            content_type=content_type,
        )
        return Artifact.create(data, content_type=content_type.split(";")[0].strip())

    async def aclose(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._owns_client:
            await self._client.aclose()
