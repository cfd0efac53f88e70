"""
Storage Factory

Factory for creating the object store implementation.

Only a local filesystem store exists; the application layer stays decoupled
from it through the IObjectStore interface.
"""

import logging
from typing import Optional

from fileshare.config.storage_config import StorageConfig
from fileshare.domain.file_sharing.storage_repository import IObjectStore
from fileshare.infrastructure.local_object_store import LocalObjectStore

logger = logging.getLogger(__name__)


class StorageFactory:
    """Factory that returns a local filesystem object store."""

    @staticmethod
    def create_storage(config: Optional[StorageConfig] = None) -> IObjectStore:
        """
        Create local filesystem object store.

        Args:
            config: Storage configuration, uses default if None

        Returns:
            IObjectStore implementation

        Raises:
            RuntimeError: If local storage initialization fails
        """
        if config is None:
            config = StorageConfig()

        try:
            storage = LocalObjectStore(config.storage_dir)
            logger.info(f"Storage factory: Using local filesystem storage at {config.storage_dir}")
            return storage
        except OSError as e:
            raise RuntimeError(f"Failed to initialize local storage: {e}") from e
