"""
Image Cache Monitoring Module

Prometheus metrics for the image cache read policy and refreshes.
"""

from .image_cache_metrics import ImageCacheMetrics

__all__ = ["ImageCacheMetrics"]
