"""
File Sharing Repositories

Repository interface for passphrases protecting shared objects.
Object metadata itself is never stored here; it lives in the object name.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional


class PassphraseRepository(ABC):
    """Abstract repository for hashed passphrases keyed by identifier."""

    @abstractmethod
    def save(self, identifier: str, passphrase_hash: str, expires_at: datetime) -> bool:
        """
        Save a passphrase hash until the object expires.

        Args:
            identifier: Object identifier
            passphrase_hash: Salted hash of the passphrase
            expires_at: Instant after which the entry may disappear

        Returns:
            True if saved, False otherwise
        """
        pass

    @abstractmethod
    def get(self, identifier: str) -> Optional[str]:
        """
        Retrieve the passphrase hash for an identifier.

        Returns:
            Hash if the object is protected, None otherwise

        Raises:
            PassphraseStoreError: If the repository cannot be reached
        """
        pass

    @abstractmethod
    def delete(self, identifier: str) -> bool:
        """
        Delete the passphrase for an identifier.

        Returns:
            True if an entry was removed, False otherwise
        """
        pass
