"""
Redis Repository

Namespaced JSON records in Redis, plus the pooled connection they share.
Writes report failure as False; reads let connection errors through so a
caller can tell a missing record from an unreachable server.
"""

import json
import logging
from typing import Any, Dict, Optional

import redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

logger = logging.getLogger(__name__)

_UNAVAILABLE = (RedisConnectionError, RedisTimeoutError)


class RedisRepository:
    """JSON records stored under ``{key_prefix}:{key}``."""

    def __init__(self, redis_client: redis.Redis, key_prefix: str = ""):
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _make_key(self, key: str) -> str:
        if not self.key_prefix:
            return key
        return f"{self.key_prefix}:{key}"

    def set_json(self, key: str, data: Dict[str, Any], ttl: Optional[int] = None) -> bool:
        """
        Store a record, expiring after ``ttl`` seconds when given.

        Returns:
            False if the record could not be serialized or written
        """
        full_key = self._make_key(key)
        try:
            payload = json.dumps(data)
        except TypeError as e:
            logger.error(f"Record for {full_key} is not JSON serializable: {e}")
            return False

        try:
            if ttl:
                written = self.redis.setex(full_key, ttl, payload)
            else:
                written = self.redis.set(full_key, payload)
        except _UNAVAILABLE as e:
            logger.error(f"Redis write failed for {full_key}: {e}")
            return False
        return bool(written)

    def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Load a record.

        Missing and corrupt records both come back as None.

        Raises:
            redis.exceptions.ConnectionError: Redis is unreachable
            redis.exceptions.TimeoutError: Redis did not answer in time
        """
        full_key = self._make_key(key)
        raw = self.redis.get(full_key)
        if raw is None:
            return None

        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError:
                logger.error(f"Record {full_key} is not valid UTF-8")
                return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.error(f"Record {full_key} is not valid JSON")
            return None

    def delete(self, key: str) -> bool:
        """Remove a record; True only if something was removed."""
        full_key = self._make_key(key)
        try:
            removed = self.redis.delete(full_key)
        except _UNAVAILABLE as e:
            logger.error(f"Redis delete failed for {full_key}: {e}")
            return False
        return removed > 0


class RedisConnectionManager:
    """Owns the connection pool and hands out a shared client."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        password: Optional[str] = None,
        max_connections: int = 20,
        connect_timeout: float = 2.0,
    ):
        self.connection_pool = redis.ConnectionPool(
            host=host,
            port=port,
            db=db,
            password=password,
            max_connections=max_connections,
            socket_connect_timeout=connect_timeout,
            socket_timeout=connect_timeout,
            retry_on_timeout=True,
        )
        self._client: Optional[redis.Redis] = None

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.Redis(connection_pool=self.connection_pool)
        return self._client

    def health_check(self) -> bool:
        try:
            return bool(self.client.ping())
        except _UNAVAILABLE:
            return False
