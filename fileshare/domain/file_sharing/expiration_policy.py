"""
Expiration Policy

Maps uploader-chosen duration tokens to expiration instants and decides
whether a stored instant has passed.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Union

from .value_objects import ExpirationToken

STAMP_FORMAT = "%Y%m%d%H"
STAMP_LENGTH = 10


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class ExpirationPolicy:
    """
    Domain service for object lifetimes.

    Instants are truncated to the hour because that is the precision the
    object name can carry. All comparisons use an injectable clock so tests
    can move time forward.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize ExpirationPolicy.

        Args:
            clock: Callable returning the current aware UTC datetime
        """
        self._clock = clock or utc_now

    def now(self) -> datetime:
        return self._clock()

    def resolve_duration(self, token: Union[str, ExpirationToken, None]) -> timedelta:
        """
        Resolve a raw token to a lifetime.

        Args:
            token: "1h", "6h", "24h" or "72h"; anything else means 1 hour

        Returns:
            Lifetime as a timedelta
        """
        return ExpirationToken.parse(token).duration

    def compute_expiration(self, token: Union[str, ExpirationToken, None]) -> datetime:
        """
        Compute the expiration instant for a new object.

        Args:
            token: Duration token chosen by the uploader

        Returns:
            now + duration, truncated to the hour (UTC)
        """
        instant = self.now() + self.resolve_duration(token)
        return self.truncate(instant)

    def is_expired(self, instant: Optional[datetime]) -> bool:
        """
        Check whether an instant has passed.

        Fails closed: a missing or incomparable instant counts as expired.

        Args:
            instant: Decoded expiration instant

        Returns:
            True iff now is strictly after the instant
        """
        if instant is None:
            return True
        try:
            if instant.tzinfo is None:
                instant = instant.replace(tzinfo=timezone.utc)
            return self.now() > instant
        except (TypeError, AttributeError, ValueError):
            return True

    @staticmethod
    def truncate(instant: datetime) -> datetime:
        """Drop minutes and below, normalizing to aware UTC."""
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        instant = instant.astimezone(timezone.utc)
        return instant.replace(minute=0, second=0, microsecond=0)

    @staticmethod
    def format_stamp(instant: datetime) -> str:
        """
        Serialize an instant as YYYYMMDDHH (UTC, zero-padded).

        Args:
            instant: Instant to serialize

        Returns:
            Ten-digit stamp
        """
        return ExpirationPolicy.truncate(instant).strftime(STAMP_FORMAT)

    @staticmethod
    def parse_stamp(stamp: str) -> Optional[datetime]:
        """
        Parse a YYYYMMDDHH stamp.

        Args:
            stamp: Raw stamp from an object name

        Returns:
            Aware UTC datetime, or None if the stamp is malformed
        """
        # strptime alone accepts unpadded fields such as "2024111"
        if not stamp or len(stamp) != STAMP_LENGTH:
            return None
        if not (stamp.isascii() and stamp.isdigit()):
            return None
        try:
            return datetime.strptime(stamp, STAMP_FORMAT).replace(tzinfo=timezone.utc)
        except ValueError:
            return None
