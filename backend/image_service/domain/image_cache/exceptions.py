"""
Image Cache Exceptions

Domain-specific exceptions for the image cache and its collaborators.
Only ColdStartFailure is allowed to escape the cache; refresh and persist
failures are absorbed and logged.
"""

from typing import Optional, Any, Dict
from fastapi import HTTPException


class ImageCacheException(Exception):
    """Base exception for image cache errors.

    Carries a stable error code and structured details for logging.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


def _error_details(original_error: Optional[Exception]) -> Dict[str, Any]:
    if not original_error:
        return {}
    return {
        "original_error": str(original_error),
        "original_error_type": type(original_error).__name__,
    }


class ColdStartFailure(ImageCacheException):
    """Raised when no artifact can be obtained at startup.

    Fatal: the service must not accept traffic without an artifact.
    """

    def __init__(
        self,
        message: str = "No image available at startup",
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message=message,
            error_code="COLD_START_FAILURE",
            details=_error_details(original_error),
        )
        if original_error:
            self.__cause__ = original_error


class RefreshFailure(ImageCacheException):
    """Raised by a fetcher when a fresh artifact could not be produced."""

    def __init__(
        self,
        message: str = "Image refresh failed",
        source: Optional[str] = None,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        details = _error_details(original_error)
        if source:
            details["source"] = source
        if status_code:
            details["status_code"] = status_code

        super().__init__(
            message=message, error_code="REFRESH_FAILURE", details=details
        )
        if original_error:
            self.__cause__ = original_error


class PersistFailure(ImageCacheException):
    """Raised by a persister when loading or saving an artifact fails."""

    def __init__(
        self,
        operation: str,
        path: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {"operation": operation, **_error_details(original_error)}
        if path:
            details["path"] = path

        super().__init__(
            message=f"Image persist operation '{operation}' failed",
            error_code="PERSIST_FAILURE",
            details=details,
        )
        if original_error:
            self.__cause__ = original_error


class ArtifactUnavailableError(ImageCacheException):
    """Raised when the cache is read before cold start has completed."""

    def __init__(self, message: str = "Image cache has not been initialized"):
        super().__init__(
            message=message,
            error_code="ARTIFACT_UNAVAILABLE",
            details={"service_status": "unavailable"},
        )


# HTTP Exceptions for API layer
class ImageCacheHTTPException(HTTPException):
    """HTTP exception wrapper for image cache errors."""

    def __init__(self, cache_exception: ImageCacheException, status_code: int = 503):
        self.cache_exception = cache_exception
        super().__init__(
            status_code=status_code,
            detail={
                "error": cache_exception.error_code,
                "message": cache_exception.message,
                "details": cache_exception.details,
            },
        )
