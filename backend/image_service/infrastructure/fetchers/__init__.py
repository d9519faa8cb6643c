"""
Upstream image fetchers.

This module provides:
- HttpImageFetcher: Streams a random image over HTTP with retry on transport errors
"""

from .http_image_fetcher import HttpImageFetcher

__all__ = ["HttpImageFetcher"]
