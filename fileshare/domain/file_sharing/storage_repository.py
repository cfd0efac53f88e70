"""
Object Store Interface

Abstract interface for the durable store holding shared objects.
Keeps the lifecycle logic independent of where the bytes actually live.
"""

from abc import ABC, abstractmethod
from typing import BinaryIO, List, Optional

from .value_objects import ObjectStat


class IObjectStore(ABC):
    """
    Interface for object storage operations.

    Objects live under flat names produced by the ObjectKeyCodec. New bytes
    are first written into a staging area under a temporary name and only
    renamed to their final name once the upload is complete, so a half-written
    object is never listed.

    Contract Guarantees:
    - list() returns final names only, never staged names
    - rename() is atomic at single-file granularity and never overwrites
    - delete(), discard_staged() and unmark_protected() are idempotent
    - Protection markers are keyed by identifier and never listed as objects
    - stat() and open() return None for missing names instead of raising
    - Failures other than "missing" raise StoreIOError
    - Names containing path separators raise ValueError
    """

    @abstractmethod
    def put(self, name: str, content: BinaryIO) -> int:
        """
        Store content under a final name (stage, then rename).

        Args:
            name: Final storage name
            content: Binary stream positioned at the start

        Returns:
            Number of bytes written

        Raises:
            StoreIOError: If the write or rename fails
        """
        pass  # pragma: no cover

    @abstractmethod
    def stage(self, content: BinaryIO) -> str:
        """
        Write content under a fresh temporary name in the staging area.

        Args:
            content: Binary stream positioned at the start

        Returns:
            Temporary name to pass to rename() or discard_staged()

        Raises:
            StoreIOError: If the write fails (the partial file is removed)
        """
        pass  # pragma: no cover

    @abstractmethod
    def rename(self, temp_name: str, final_name: str) -> None:
        """
        Publish a staged file under its final name.

        An existing object under final_name is never replaced, even by a
        concurrent publish racing for the same name.

        Raises:
            StoreIOError: If the staged file is gone, the final name is
                taken, or the rename fails
        """
        pass  # pragma: no cover

    @abstractmethod
    def list(self) -> List[str]:
        """
        List final names currently in the store.

        Raises:
            StoreIOError: If the store cannot be read
        """
        pass  # pragma: no cover

    @abstractmethod
    def stat(self, name: str) -> Optional[ObjectStat]:
        """Size and timestamps of a final name, or None if missing."""
        pass  # pragma: no cover

    @abstractmethod
    def open(self, name: str) -> Optional[BinaryIO]:
        """
        Open a final name for reading.

        The caller must close the returned stream.

        Returns:
            Binary stream, or None if the name is missing
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, name: str) -> bool:
        """
        Delete a final name.

        Returns:
            True if a file was removed, False if it was already gone

        Raises:
            StoreIOError: If the delete fails for another reason
        """
        pass  # pragma: no cover

    @abstractmethod
    def list_staged(self) -> List[str]:
        """List temporary names in the staging area."""
        pass  # pragma: no cover

    @abstractmethod
    def stat_staged(self, temp_name: str) -> Optional[ObjectStat]:
        """Size and timestamps of a staged file, or None if missing."""
        pass  # pragma: no cover

    @abstractmethod
    def discard_staged(self, temp_name: str) -> bool:
        """
        Remove a staged file.

        Returns:
            True if a file was removed, False if it was already gone
        """
        pass  # pragma: no cover

    @abstractmethod
    def is_available(self) -> bool:
        """Check whether the store can currently be written to."""
        pass  # pragma: no cover

    @abstractmethod
    def mark_protected(self, identifier: str) -> None:
        """
        Record that the object with this identifier needs a passphrase.

        The marker lives next to the objects, so it survives restarts and is
        shared by every process using the same store.

        Raises:
            StoreIOError: If the marker cannot be written
        """
        pass  # pragma: no cover

    @abstractmethod
    def is_protected(self, identifier: str) -> bool:
        """Check whether a protection marker exists for an identifier."""
        pass  # pragma: no cover

    @abstractmethod
    def unmark_protected(self, identifier: str) -> bool:
        """
        Remove a protection marker.

        Returns:
            True if a marker was removed, False if there was none
        """
        pass  # pragma: no cover

    @abstractmethod
    def list_protected(self) -> List[str]:
        """List identifiers that carry a protection marker."""
        pass  # pragma: no cover

    @abstractmethod
    def stat_protected(self, identifier: str) -> Optional[ObjectStat]:
        """Timestamps of a protection marker, or None if missing."""
        pass  # pragma: no cover
