"""
Redis Configuration

Redis backs the passphrase store. One connection manager is created per
process by init_redis() and shared by every repository.
"""

import os
from typing import Any, Dict, Optional

from redis.connection import parse_url

from fileshare.infrastructure.redis_repository import RedisConnectionManager, RedisRepository

PASSPHRASE_KEY_PREFIX = "fileshare"


class RedisConfig:
    """Connection settings from REDIS_URL, or from the REDIS_* parts."""

    def __init__(self):
        self.url = os.getenv("REDIS_URL")
        self.max_connections = int(os.getenv("REDIS_MAX_CONNECTIONS", 20))

        parsed = parse_url(self.url) if self.url else {}
        self.host = parsed.get("host", os.getenv("REDIS_HOST", "localhost"))
        self.port = int(parsed.get("port", os.getenv("REDIS_PORT", 6379)))
        self.db = int(parsed.get("db", os.getenv("REDIS_DB", 0)))
        self.password = parsed.get("password", os.getenv("REDIS_PASSWORD"))

    def connection_kwargs(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "db": self.db,
            "password": self.password or None,
            "max_connections": self.max_connections,
        }


_redis_manager: Optional[RedisConnectionManager] = None


def init_redis(config: Optional[RedisConfig] = None) -> RedisConnectionManager:
    """
    Create the process-wide connection manager.

    No connection is opened until the first command.
    """
    global _redis_manager
    _redis_manager = RedisConnectionManager(**(config or RedisConfig()).connection_kwargs())
    return _redis_manager


def get_redis_repository(key_prefix: str = PASSPHRASE_KEY_PREFIX) -> RedisRepository:
    """
    Repository over the shared client.

    Raises:
        RuntimeError: If init_redis() has not run
    """
    if _redis_manager is None:
        raise RuntimeError("Redis is not initialized; call init_redis() first")
    return RedisRepository(_redis_manager.client, key_prefix)


def redis_health_check() -> bool:
    return _redis_manager is not None and _redis_manager.health_check()
