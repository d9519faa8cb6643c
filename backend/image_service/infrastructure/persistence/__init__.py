"""
Image persistence for cold-start recovery.

This module provides:
- FileArtifactPersister: Keeps the latest image as a file on disk
"""

from .file_persister import FileArtifactPersister

__all__ = ["FileArtifactPersister"]
