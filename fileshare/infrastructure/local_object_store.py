"""
Local Object Store Implementation

Concrete implementation of IObjectStore on the local filesystem.
Final objects live flat in the base directory; uploads in progress are
written to a staging subdirectory on the same filesystem so that publishing
them is a single atomic link. Passphrase-protected identifiers carry an empty
marker file in a second subdirectory.
"""

import logging
import os
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, List, Optional

from fileshare.domain.errors import StoreIOError
from fileshare.domain.file_sharing.storage_repository import IObjectStore
from fileshare.domain.file_sharing.value_objects import ObjectStat

logger = logging.getLogger(__name__)

STAGING_DIRNAME = ".incoming"
PROTECTED_DIRNAME = ".protected"
WRITE_CHUNK_SIZE = 64 * 1024


class LocalObjectStore(IObjectStore):
    """
    Local filesystem implementation of IObjectStore.

    Thread Safety:
        No in-process locking. Publishing relies on os.link() and removal
        on os.unlink(), both atomic for a single file on POSIX filesystems.

    Attributes:
        base_path: Directory holding published objects
        staging_path: Directory holding uploads in progress
        protected_path: Directory holding one empty marker file per
            passphrase-protected identifier
    """

    def __init__(self, base_path: str = "/tmp/fileshare/uploads"):
        """
        Initialize the local object store.

        Args:
            base_path: Directory for published objects (created if missing)
        """
        self.base_path = Path(base_path)
        self.staging_path = self.base_path / STAGING_DIRNAME
        self.protected_path = self.base_path / PROTECTED_DIRNAME
        self._ensure_directories()

    def _ensure_directories(self) -> None:
        """
        Ensure the base directory and its subdirectories exist.

        Raises:
            PermissionError: If insufficient permissions to create directory
            OSError: If directory creation fails for other reasons
        """
        try:
            self.staging_path.mkdir(parents=True, exist_ok=True)
            self.protected_path.mkdir(exist_ok=True)
        except PermissionError as e:
            raise PermissionError(
                f"Insufficient permissions to create storage directory: {self.base_path}"
            ) from e
        except OSError as e:
            raise OSError(
                f"Failed to create storage directory: {self.base_path}"
            ) from e

    # IObjectStore interface methods

    def put(self, name: str, content: BinaryIO) -> int:
        final_path = self._object_path(name)
        temp_name = self.stage(content)
        try:
            self.rename(temp_name, final_path.name)
        except StoreIOError:
            self.discard_staged(temp_name)
            raise
        stat = self.stat(name)
        return stat.size_bytes if stat else 0

    def stage(self, content: BinaryIO) -> str:
        temp_name = f"{int(time.time() * 1000)}-{uuid.uuid4().hex}.part"
        temp_path = self.staging_path / temp_name

        try:
            with open(temp_path, "wb") as f:
                while True:
                    chunk = content.read(WRITE_CHUNK_SIZE)
                    if not chunk:
                        break
                    f.write(chunk)
        except (IOError, OSError) as e:
            temp_path.unlink(missing_ok=True)
            raise StoreIOError(f"Failed to stage upload: {e}", original_error=e) from e

        return temp_name

    def rename(self, temp_name: str, final_name: str) -> None:
        temp_path = self._staged_path(temp_name)
        final_path = self._object_path(final_name)

        # link() fails on an existing name where os.replace() would overwrite
        try:
            os.link(temp_path, final_path)
        except FileExistsError as e:
            raise StoreIOError(f"Object name already taken: {final_name}", original_error=e) from e
        except FileNotFoundError as e:
            raise StoreIOError(f"Staged upload is gone: {temp_name}", original_error=e) from e
        except OSError as e:
            raise StoreIOError(f"Failed to publish {final_name}: {e}", original_error=e) from e

        try:
            temp_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            # Already published; the sweep purges the leftover staged file
            logger.warning(f"Failed to remove staged file {temp_name}: {e}")

    def list(self) -> List[str]:
        try:
            with os.scandir(self.base_path) as entries:
                return [entry.name for entry in entries if entry.is_file()]
        except OSError as e:
            raise StoreIOError(f"Failed to list {self.base_path}: {e}", original_error=e) from e

    def stat(self, name: str) -> Optional[ObjectStat]:
        return self._stat_path(self._object_path(name))

    def open(self, name: str) -> Optional[BinaryIO]:
        path = self._object_path(name)
        try:
            return open(path, "rb")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreIOError(f"Failed to open {name}: {e}", original_error=e) from e

    def delete(self, name: str) -> bool:
        path = self._object_path(name)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StoreIOError(f"Failed to delete {name}: {e}", original_error=e) from e

    def list_staged(self) -> List[str]:
        try:
            with os.scandir(self.staging_path) as entries:
                return [entry.name for entry in entries if entry.is_file()]
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StoreIOError(f"Failed to list staged uploads: {e}", original_error=e) from e

    def stat_staged(self, temp_name: str) -> Optional[ObjectStat]:
        return self._stat_path(self._staged_path(temp_name))

    def discard_staged(self, temp_name: str) -> bool:
        path = self._staged_path(temp_name)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StoreIOError(f"Failed to discard {temp_name}: {e}", original_error=e) from e

    def mark_protected(self, identifier: str) -> None:
        path = self._marker_path(identifier)
        try:
            path.touch()
        except OSError as e:
            raise StoreIOError(
                f"Failed to mark {identifier} as protected: {e}", original_error=e
            ) from e

    def is_protected(self, identifier: str) -> bool:
        return self._stat_path(self._marker_path(identifier)) is not None

    def unmark_protected(self, identifier: str) -> bool:
        path = self._marker_path(identifier)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StoreIOError(
                f"Failed to remove protection marker {identifier}: {e}", original_error=e
            ) from e

    def list_protected(self) -> List[str]:
        try:
            with os.scandir(self.protected_path) as entries:
                return [entry.name for entry in entries if entry.is_file()]
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StoreIOError(f"Failed to list protection markers: {e}", original_error=e) from e

    def stat_protected(self, identifier: str) -> Optional[ObjectStat]:
        return self._stat_path(self._marker_path(identifier))

    def is_available(self) -> bool:
        """
        Check if local storage is available.

        Returns:
            True if the storage directory is writable
        """
        return self.base_path.exists() and os.access(self.base_path, os.W_OK)

    # Helpers

    def _object_path(self, name: str) -> Path:
        return self.base_path / _validate_name(name)

    def _staged_path(self, temp_name: str) -> Path:
        return self.staging_path / _validate_name(temp_name)

    def _marker_path(self, identifier: str) -> Path:
        return self.protected_path / _validate_name(identifier)

    def _stat_path(self, path: Path) -> Optional[ObjectStat]:
        try:
            st = path.stat()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreIOError(f"Failed to stat {path.name}: {e}", original_error=e) from e

        if not path.is_file():
            return None

        # st_birthtime is only reported on some platforms
        created = getattr(st, "st_birthtime", None) or st.st_mtime
        return ObjectStat(
            size_bytes=st.st_size,
            created_at=datetime.fromtimestamp(created, tz=timezone.utc),
            modified_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        )


def _validate_name(name: str) -> str:
    """
    Reject names that could escape the store directory.

    Raises:
        ValueError: If the name is empty or contains a path component
    """
    if not name or not name.strip():
        raise ValueError("name cannot be empty")
    if name in (".", "..") or "/" in name or "\\" in name or "\x00" in name:
        raise ValueError(f"Invalid object name: {name!r}")
    return name
