"""
Share Application Service

Coordinates the file sharing use cases: upload with optional passphrase
protection, info and listing for the API, and guarded downloads.
"""

import logging
from dataclasses import dataclass
from typing import Any, BinaryIO, Dict, Iterator, List, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from fileshare.domain.errors import (
    PassphraseRequiredError,
    PassphraseStoreError,
)
from fileshare.domain.file_sharing import (
    ExpirationToken,
    LifecycleManager,
    ObjectMetadata,
    PassphraseRepository,
    StoredObject,
)

logger = logging.getLogger(__name__)


@dataclass
class DownloadHandle:
    """A resolved object together with its open byte stream."""

    stored: StoredObject
    chunks: Iterator[bytes]


class ShareService:
    """
    Application service for sharing files.

    Wraps the LifecycleManager with passphrase checks and shapes results
    into the dictionaries returned by the API.
    """

    def __init__(
        self,
        lifecycle_manager: LifecycleManager,
        passphrase_repository: Optional[PassphraseRepository] = None,
        public_base_url: Optional[str] = None,
    ):
        """
        Initialize ShareService.

        Args:
            lifecycle_manager: Domain service owning the stored objects
            passphrase_repository: Store for passphrase hashes; protection is
                unavailable when None
            public_base_url: Base for share links; the caller's request URL
                is used when None
        """
        self.lifecycle_manager = lifecycle_manager
        self.passphrase_repository = passphrase_repository
        self.public_base_url = public_base_url

        if passphrase_repository is not None:
            lifecycle_manager.add_delete_listener(self._forget_passphrase)

    def upload(
        self,
        content: Optional[BinaryIO],
        filename: Optional[str],
        password: Optional[str] = None,
        single_download: bool = False,
        expiration: Optional[str] = None,
        base_url: str = "",
    ) -> Dict[str, Any]:
        """
        Store an upload and return its share details.

        The protection marker and the passphrase hash are both written before
        the object is published, so a protected object is never reachable
        without them.

        Raises:
            UploadError: If the upload could not be stored or protected
        """
        token = ExpirationToken.parse(expiration)
        before_publish = None
        if password:
            before_publish = self._protect_with(password)

        stored = self.lifecycle_manager.store_upload(
            content,
            filename,
            expiration=token.value,
            single_download=single_download,
            before_publish=before_publish,
            protected=bool(password),
        )

        return {
            "success": True,
            "filename": stored.original_name,
            "identifier": stored.identifier,
            "url": stored.generate_share_url(self._base_url(base_url)),
            "size": stored.size_bytes,
            "expires_at": stored.expires_at.isoformat(),
            "settings": {
                "password_protected": bool(password),
                "singleDownload": stored.single_download,
                "expiration": token.value,
            },
        }

    def get_file_info(self, identifier: str, base_url: str = "") -> Dict[str, Any]:
        """
        Describe a live object.

        Raises:
            ObjectNotFoundError: If nothing matches
            ExpiredObjectError: If the match had expired (it is deleted)
            StoreIOError: If protection cannot be determined
        """
        stored = self.lifecycle_manager.resolve(identifier)
        return {
            "identifier": stored.identifier,
            "name": stored.original_name,
            "size": stored.size_bytes,
            "size_mb": stored.get_size_mb(),
            "expires_at": stored.expires_at.isoformat(),
            "single_download": stored.single_download,
            "password_protected": self.lifecycle_manager.is_protected(stored),
            "download_url": stored.generate_share_url(self._base_url(base_url)),
        }

    def list_files(self, base_url: str = "") -> List[Dict[str, Any]]:
        """List live objects, newest first."""
        base = self._base_url(base_url)
        return [
            {
                "name": stored.original_name,
                "identifier": stored.identifier,
                "size": stored.size_bytes,
                "upload_date": stored.created_at.isoformat(),
                "expires_at": stored.expires_at.isoformat(),
                "expired": False,
                "single_download": stored.single_download,
                "url": stored.generate_share_url(base),
            }
            for stored in self.lifecycle_manager.list_live()
        ]

    def open_download(self, identifier: str, passphrase: Optional[str] = None) -> DownloadHandle:
        """
        Resolve an identifier and open its byte stream.

        Whether a passphrase is needed comes from the object's protection
        marker, never from the passphrase store. A protected object whose
        hash is missing from the store is refused.

        Raises:
            ObjectNotFoundError: If nothing matches or the object vanished
            ExpiredObjectError: If the object has expired
            PassphraseRequiredError: If the passphrase is missing or wrong
            PassphraseStoreError: If the passphrase store is unreachable
        """
        stored = self.lifecycle_manager.resolve(identifier)

        if self.lifecycle_manager.is_protected(stored):
            self._check_passphrase(identifier, passphrase)

        chunks = self.lifecycle_manager.serve_download(stored)
        logger.info(f"Serving {identifier} ({stored.size_bytes} bytes)")
        return DownloadHandle(stored=stored, chunks=chunks)

    def sweep(self) -> Dict[str, Any]:
        """Run one expiration sweep and return its report."""
        return self.lifecycle_manager.sweep().to_dict()

    def _protect_with(self, password: str):
        if self.passphrase_repository is None:
            raise PassphraseStoreError("Passphrase protection is not configured")

        passphrase_hash = generate_password_hash(password)

        def save_passphrase(metadata: ObjectMetadata) -> None:
            saved = self.passphrase_repository.save(
                metadata.identifier, passphrase_hash, metadata.expires_at
            )
            if not saved:
                raise PassphraseStoreError(
                    f"Could not save passphrase for {metadata.identifier}"
                )

        return save_passphrase

    def _check_passphrase(self, identifier: str, passphrase: Optional[str]) -> None:
        if self.passphrase_repository is None:
            raise PassphraseStoreError("Passphrase protection is not configured")

        passphrase_hash = self.passphrase_repository.get(identifier)
        if passphrase_hash is None:
            logger.warning(f"No passphrase on record for protected object {identifier}")
            raise PassphraseRequiredError(f"Passphrase required for {identifier}")

        if not passphrase or not check_password_hash(passphrase_hash, passphrase):
            logger.warning(f"Rejected download of {identifier}: bad or missing passphrase")
            raise PassphraseRequiredError(f"Passphrase required for {identifier}")

    def _forget_passphrase(self, identifier: str) -> None:
        if self.passphrase_repository.delete(identifier):
            logger.debug(f"Dropped passphrase for removed object {identifier}")

    def _base_url(self, request_base_url: str) -> str:
        return self.public_base_url or request_base_url
