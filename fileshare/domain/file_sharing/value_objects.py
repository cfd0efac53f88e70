"""
File Sharing Value Objects

Immutable value objects describing shared objects and their lifetimes.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional


class ExpirationToken(Enum):
    """Coarse lifetimes an uploader can choose from."""

    ONE_HOUR = "1h"
    SIX_HOURS = "6h"
    ONE_DAY = "24h"
    THREE_DAYS = "72h"

    @property
    def duration(self) -> timedelta:
        """Lifetime represented by this token."""
        return timedelta(hours=int(self.value[:-1]))

    @classmethod
    def parse(cls, value: Optional[str]) -> "ExpirationToken":
        """
        Parse a raw token, falling back to the shortest lifetime.

        Unknown or empty tokens never raise: they resolve to ONE_HOUR so
        that a bad form value produces a short-lived object, not an error.

        Args:
            value: Raw token such as "6h"

        Returns:
            Matching ExpirationToken, or ONE_HOUR when unrecognized
        """
        if isinstance(value, cls):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.ONE_HOUR


@dataclass(frozen=True)
class ObjectMetadata:
    """
    Metadata encoded into a stored object's name.

    Attributes:
        identifier: Public short identifier used in links
        expires_at: Expiration instant (UTC, hour granularity); None when the
            persisted stamp could not be parsed, which counts as expired
        single_download: Delete the object after its first complete download
        original_name: Filename supplied by the uploader, extension included
    """

    identifier: str
    expires_at: Optional[datetime]
    single_download: bool
    original_name: str


@dataclass(frozen=True)
class ObjectStat:
    """File attributes reported by the object store."""

    size_bytes: int
    created_at: datetime
    modified_at: datetime

    def get_size_mb(self) -> float:
        """Size in megabytes, rounded to two decimals."""
        return round(self.size_bytes / (1024 * 1024), 2)
