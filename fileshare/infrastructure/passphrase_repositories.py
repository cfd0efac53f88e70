"""
Passphrase Repositories

Implementations of PassphraseRepository. Redis is the default backend; the
in-memory backend serves single-process deployments and tests.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Tuple

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from fileshare.domain.errors import PassphraseStoreError
from fileshare.domain.file_sharing.repositories import PassphraseRepository

from .redis_repository import RedisRepository

logger = logging.getLogger(__name__)


def _seconds_until(expires_at: datetime) -> int:
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    remaining = expires_at - datetime.now(timezone.utc)
    return max(1, int(remaining.total_seconds()))


class RedisPassphraseRepository(PassphraseRepository):
    """
    Redis-based implementation of PassphraseRepository.

    Entries expire through Redis TTL at the same instant as the object they
    protect, so nothing needs to be swept here.
    """

    def __init__(self, redis_repository: RedisRepository):
        """
        Initialize with Redis repository.

        Args:
            redis_repository: RedisRepository instance
        """
        self.redis_repo = redis_repository
        self.key_prefix = "passphrase"

    def save(self, identifier: str, passphrase_hash: str, expires_at: datetime) -> bool:
        key = f"{self.key_prefix}:{identifier}"
        return self.redis_repo.set_json(
            key, {"hash": passphrase_hash}, ttl=_seconds_until(expires_at)
        )

    def get(self, identifier: str) -> Optional[str]:
        key = f"{self.key_prefix}:{identifier}"
        try:
            data = self.redis_repo.get_json(key)
        except (RedisConnectionError, RedisTimeoutError) as e:
            logger.error(f"Passphrase store unreachable for {identifier}: {e}")
            raise PassphraseStoreError(
                "Passphrase store unavailable", original_error=e
            ) from e

        if not data:
            return None
        return data.get("hash")

    def delete(self, identifier: str) -> bool:
        return self.redis_repo.delete(f"{self.key_prefix}:{identifier}")


class InMemoryPassphraseRepository(PassphraseRepository):
    """
    Process-local PassphraseRepository.

    Expired entries are dropped when read and on every save, so the table
    never holds more than the live entries plus those expired since the
    last save.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._entries: Dict[str, Tuple[str, datetime]] = {}
        self._lock = threading.Lock()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def save(self, identifier: str, passphrase_hash: str, expires_at: datetime) -> bool:
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        with self._lock:
            self._evict_expired()
            self._entries[identifier] = (passphrase_hash, expires_at)
        return True

    def get(self, identifier: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(identifier)
            if entry is None:
                return None
            passphrase_hash, expires_at = entry
            if self._clock() > expires_at:
                del self._entries[identifier]
                return None
            return passphrase_hash

    def delete(self, identifier: str) -> bool:
        with self._lock:
            return self._entries.pop(identifier, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _evict_expired(self) -> None:
        # Caller holds the lock
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._entries.items() if now > expires_at]
        for key in expired:
            del self._entries[key]
