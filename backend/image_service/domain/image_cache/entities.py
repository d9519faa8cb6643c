"""
Image Cache Domain Entities

The cached artifact. Artifacts are immutable; the cache replaces its
held artifact on every successful refresh instead of mutating it.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

DEFAULT_CONTENT_TYPE = "image/jpeg"


@dataclass(frozen=True)
class Artifact:
    """
    Cached image payload.

    Holds the raw bytes and the instant they were obtained.
    """

    data: bytes
    obtained_at: datetime
    content_type: str = DEFAULT_CONTENT_TYPE

    def __post_init__(self) -> None:
        """Validate artifact payload."""
        if not isinstance(self.data, (bytes, bytearray)):
            raise TypeError(
                f"Artifact data must be bytes, got {type(self.data).__name__}"
            )
        if not self.data:
            raise ValueError("Artifact data cannot be empty")

    @classmethod
    def create(
        cls,
        data: bytes,
        content_type: Optional[str] = None,
        obtained_at: Optional[datetime] = None,
    ) -> "Artifact":
        """Create an artifact stamped with the current UTC time."""
        return cls(
            data=bytes(data),
            obtained_at=obtained_at or datetime.now(timezone.utc),
            content_type=content_type or DEFAULT_CONTENT_TYPE,
        )

    @property
    def size_bytes(self) -> int:
        """Payload size in bytes."""
        return len(self.data)

    def __repr__(self) -> str:
        return (
            f"Artifact(size_bytes={self.size_bytes}, "
            f"content_type={self.content_type!r}, "
            f"obtained_at={self.obtained_at.isoformat()})"
        )
