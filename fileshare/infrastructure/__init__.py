"""Infrastructure layer for the filesystem store, Redis and external services."""

from .local_object_store import LocalObjectStore
from .passphrase_repositories import InMemoryPassphraseRepository, RedisPassphraseRepository
from .redis_repository import RedisConnectionManager, RedisRepository
from .storage_factory import StorageFactory

__all__ = [
    'InMemoryPassphraseRepository',
    'LocalObjectStore',
    'RedisConnectionManager',
    'RedisPassphraseRepository',
    'RedisRepository',
    'StorageFactory',
]
