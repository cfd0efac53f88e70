"""
File Sharing Entities

A stored object has no record of its own: it is its encoded name plus the
file bytes behind it.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .value_objects import ObjectMetadata


@dataclass(frozen=True)
class StoredObject:
    """
    Entity representing a live object in the store.

    Attributes:
        name: Encoded storage name
        metadata: Metadata decoded from the name
        size_bytes: File size from the store
        created_at: Creation time from the store
    """

    name: str
    metadata: ObjectMetadata
    size_bytes: int
    created_at: datetime

    @property
    def identifier(self) -> str:
        return self.metadata.identifier

    @property
    def original_name(self) -> str:
        return self.metadata.original_name

    @property
    def single_download(self) -> bool:
        return self.metadata.single_download

    @property
    def expires_at(self) -> Optional[datetime]:
        return self.metadata.expires_at

    def get_size_mb(self) -> float:
        """Size in megabytes, rounded to two decimals."""
        return round(self.size_bytes / (1024 * 1024), 2)

    def generate_share_url(self, base_url: str = "") -> str:
        """
        Build the public short link for this object.

        Args:
            base_url: Scheme and host, e.g. "https://files.example.com"

        Returns:
            Short link of the form "{base_url}/{identifier}"
        """
        return f"{base_url.rstrip('/')}/{self.identifier}"

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "identifier": self.identifier,
            "original_name": self.original_name,
            "single_download": self.single_download,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "size_bytes": self.size_bytes,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class SweepReport:
    """Outcome of one expiration sweep."""

    scanned: int = 0
    expired_removed: int = 0
    malformed_removed: int = 0
    stale_uploads_removed: int = 0
    markers_removed: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def removed(self) -> int:
        return self.expired_removed + self.malformed_removed + self.stale_uploads_removed

    def to_dict(self) -> dict:
        return {
            "scanned": self.scanned,
            "expired_removed": self.expired_removed,
            "malformed_removed": self.malformed_removed,
            "stale_uploads_removed": self.stale_uploads_removed,
            "markers_removed": self.markers_removed,
            "errors": list(self.errors),
        }
