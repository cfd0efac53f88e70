"""
File Sharing Services

Domain service managing the lifecycle of shared objects: publishing uploads,
resolving identifiers, serving downloads and sweeping expired objects.
"""

import logging
from datetime import timedelta
from functools import partial
from typing import BinaryIO, Callable, Iterable, List, Optional, Set, Tuple

from ..errors import (
    ExpiredObjectError,
    ObjectNotFoundError,
    StoreIOError,
    UploadError,
)
from .entities import StoredObject, SweepReport
from .expiration_policy import ExpirationPolicy
from .identifier_allocator import IdentifierAllocator
from .object_key_codec import DELIMITER, ObjectKeyCodec
from .storage_repository import IObjectStore
from .value_objects import ObjectMetadata

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024

DeleteListener = Callable[[str], None]


class ObjectStream:
    """
    Closable chunk iterator over an open object.

    ``on_complete`` runs once, right after the last chunk has been read and
    the file closed. close() releases the file without running it, so a
    response that is dropped before or during iteration leaves no open handle
    and triggers no completion work.
    """

    def __init__(
        self,
        handle: BinaryIO,
        chunk_size: int,
        on_complete: Optional[Callable[[], None]] = None,
    ):
        self._handle = handle
        self._chunk_size = chunk_size
        self._on_complete = on_complete
        self.closed = False

    def __iter__(self) -> "ObjectStream":
        return self

    def __next__(self) -> bytes:
        if self.closed:
            raise StopIteration

        try:
            chunk = self._handle.read(self._chunk_size)
        except Exception:
            self.close()
            raise

        if chunk:
            return chunk

        self.close()
        on_complete, self._on_complete = self._on_complete, None
        if on_complete is not None:
            on_complete()
        raise StopIteration

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._handle.close()


class LifecycleManager:
    """
    Domain service for ephemeral shared objects.

    Every decision is made from the object name alone: there is no metadata
    record to keep in sync. No locks are taken; the store's atomic rename and
    idempotent delete are the only coordination between concurrent requests,
    the sweep and single-download deletions.

    Passphrase protection is recorded as a marker in the store keyed by
    identifier, written before the object is published and removed after it
    is deleted. Delete listeners are told about every identifier whose object
    this manager removed.

    Resolve states::

        Resolving -> Found-Live | Found-Expired | NotFound
        Found-Expired -> deleted, reported as ExpiredObjectError
    """

    def __init__(
        self,
        store: IObjectStore,
        codec: ObjectKeyCodec,
        policy: ExpirationPolicy,
        allocator: IdentifierAllocator,
        stale_upload_age: timedelta = timedelta(hours=1),
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        reserved_identifiers: Iterable[str] = (),
    ):
        """
        Initialize LifecycleManager.

        Args:
            store: Backing object store
            codec: Codec for object names
            policy: Expiration policy (owns the clock)
            allocator: Identifier allocator
            stale_upload_age: Age after which an idle staged upload or an
                orphaned protection marker is purged
            chunk_size: Read size when streaming downloads
            reserved_identifiers: Identifiers never handed out, such as
                path segments routed to something other than a short link
        """
        self.store = store
        self.codec = codec
        self.policy = policy
        self.allocator = allocator
        self.stale_upload_age = stale_upload_age
        self.chunk_size = chunk_size
        self.reserved_identifiers = frozenset(reserved_identifiers)
        self._delete_listeners: List[DeleteListener] = []

    def add_delete_listener(self, listener: DeleteListener) -> None:
        """
        Register a callback run with the identifier of every removed object.

        Listener failures are logged and never interrupt the removal.
        """
        self._delete_listeners.append(listener)

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def store_upload(
        self,
        content: Optional[BinaryIO],
        original_name: Optional[str],
        expiration: Optional[str] = None,
        single_download: bool = False,
        before_publish: Optional[Callable[[ObjectMetadata], None]] = None,
        protected: bool = False,
    ) -> StoredObject:
        """
        Turn uploaded bytes into a live object.

        The bytes are staged first; the identifier and expiration are only
        fixed once the whole upload is on disk, and the staged file is renamed
        to its final name as the very last step. Anything that fails before
        the rename leaves nothing resolvable behind.

        Args:
            content: Uploaded bytes
            original_name: Filename supplied by the client
            expiration: Duration token ("1h", "6h", "24h", "72h")
            single_download: Delete after the first complete download
            before_publish: Hook run with the final metadata right before the
                rename; raising aborts the upload
            protected: Write a protection marker before publishing

        Returns:
            The newly published StoredObject

        Raises:
            UploadError: If no content was given or it could not be stored
        """
        if content is None:
            raise UploadError("No file provided")

        display_name = self.codec.normalize_original_name(original_name)

        try:
            temp_name = self.store.stage(content)
        except StoreIOError as e:
            raise UploadError("Failed to write upload", original_error=e) from e

        identifier = None
        taken: Set[str] = set()
        try:
            taken = self._identifiers_on_disk()
            taken.update(self.store.list_protected())
            taken.update(self.reserved_identifiers)
            identifier = self.allocator.allocate(in_use=taken.__contains__)
            metadata = ObjectMetadata(
                identifier=identifier,
                expires_at=self.policy.compute_expiration(expiration),
                single_download=bool(single_download),
                original_name=display_name,
            )
            name = self.codec.encode(metadata)
            if protected:
                self.store.mark_protected(identifier)
            if before_publish is not None:
                before_publish(metadata)
            self.store.rename(temp_name, name)
        except Exception as e:
            self._discard_staged_quietly(temp_name)
            if identifier is not None:
                if identifier not in taken:
                    self._forget(identifier)
                self.allocator.release(identifier)
            raise UploadError(f"Failed to publish upload: {e}", original_error=e) from e

        stat = self.store.stat(name)
        logger.info(
            f"Stored object {identifier} ({display_name}, "
            f"expires {metadata.expires_at.isoformat()}, "
            f"single_download={metadata.single_download})"
        )
        return StoredObject(
            name=name,
            metadata=metadata,
            size_bytes=stat.size_bytes if stat else 0,
            created_at=stat.created_at if stat else self.policy.now(),
        )

    # ------------------------------------------------------------------
    # Resolve / serve
    # ------------------------------------------------------------------

    def resolve(self, identifier: str) -> StoredObject:
        """
        Resolve an identifier to a live object.

        Scans every name in the store and returns the first whose decoded
        identifier matches. Linear in the number of stored objects.

        Args:
            identifier: Public identifier from a share link

        Returns:
            The matching live StoredObject

        Raises:
            ObjectNotFoundError: If nothing matches or the object vanished
            ExpiredObjectError: If the match has expired (it is deleted first)
        """
        match = self._find(identifier)
        if match is None:
            raise ObjectNotFoundError(f"No object for identifier: {identifier}")

        name, metadata = match
        if self.policy.is_expired(metadata.expires_at):
            self._delete_quietly(name, identifier, reason="expired on resolve")
            raise ExpiredObjectError(f"Object has expired: {identifier}")

        stat = self.store.stat(name)
        if stat is None:
            # Removed by a sweep or a single-download delete after listing
            raise ObjectNotFoundError(f"Object vanished: {identifier}")

        return StoredObject(
            name=name,
            metadata=metadata,
            size_bytes=stat.size_bytes,
            created_at=stat.created_at,
        )

    def is_protected(self, stored: StoredObject) -> bool:
        """
        Whether a resolved object was uploaded with a passphrase.

        Raises:
            StoreIOError: If the marker cannot be checked
        """
        return self.store.is_protected(stored.identifier)

    def serve_download(self, stored: StoredObject) -> ObjectStream:
        """
        Open a resolved object and return its byte stream.

        Expiration is checked again here to close the window between resolve
        and serve. The file is opened eagerly so a vanished object surfaces as
        ObjectNotFoundError before any byte is sent; the returned stream owns
        the handle and releases it on exhaustion, on a read error or on
        close(), whichever comes first.

        For single-download objects the delete happens only after the stream
        has been consumed to the end. A stream that is closed early (client
        disconnect) or fails while reading leaves the object in place. Two
        concurrent downloads may both complete; the second delete is a no-op.

        Args:
            stored: Object returned by resolve()

        Returns:
            ObjectStream over file chunks

        Raises:
            ExpiredObjectError: If the object expired since it was resolved
            ObjectNotFoundError: If the object is gone
        """
        if self.policy.is_expired(stored.expires_at):
            self._delete_quietly(stored.name, stored.identifier, reason="expired on serve")
            raise ExpiredObjectError(f"Object has expired: {stored.identifier}")

        handle = self.store.open(stored.name)
        if handle is None:
            raise ObjectNotFoundError(f"Object vanished: {stored.identifier}")

        on_complete = None
        if stored.single_download:
            on_complete = partial(self._delete_after_download, stored)
        return ObjectStream(handle, self.chunk_size, on_complete=on_complete)

    def _delete_after_download(self, stored: StoredObject) -> None:
        try:
            if self.store.delete(stored.name):
                logger.info(f"Deleted single-download object: {stored.identifier}")
                self._forget(stored.identifier)
            else:
                logger.info(
                    f"Single-download object {stored.identifier} was already deleted"
                )
        except StoreIOError as e:
            # Response already sent; log only
            logger.error(
                f"Failed to delete single-download object {stored.identifier}: {e}"
            )

    # ------------------------------------------------------------------
    # Listing and sweeping
    # ------------------------------------------------------------------

    def list_live(self) -> List[StoredObject]:
        """
        List decodable, non-expired objects, newest first.

        Read-only: expired objects are skipped, not deleted.

        Returns:
            List of StoredObject
        """
        live = []
        for name in self.store.list():
            metadata = self.codec.decode(name)
            if metadata is None or self.policy.is_expired(metadata.expires_at):
                continue
            stat = self.store.stat(name)
            if stat is None:
                continue
            live.append(
                StoredObject(
                    name=name,
                    metadata=metadata,
                    size_bytes=stat.size_bytes,
                    created_at=stat.created_at,
                )
            )
        live.sort(key=lambda obj: obj.created_at, reverse=True)
        return live

    def sweep(self) -> SweepReport:
        """
        Delete every expired or undecodable object and stale staged uploads.

        Protection markers left without an object (an upload that died
        before publishing, or a delete whose cleanup failed) are removed once
        they are older than stale_upload_age.

        Failures on single entries are logged and recorded in the report;
        they never stop the sweep.

        Returns:
            SweepReport with counts and errors
        """
        report = SweepReport()

        try:
            names = self.store.list()
        except StoreIOError as e:
            error_msg = f"Failed to list store: {e}"
            logger.error(error_msg)
            report.errors.append(error_msg)
            return report

        for name in names:
            report.scanned += 1
            metadata = self.codec.decode(name)
            if metadata is None:
                reason = "malformed"
            elif self.policy.is_expired(metadata.expires_at):
                reason = "expired"
            else:
                continue

            try:
                removed = self.store.delete(name)
            except (StoreIOError, ValueError) as e:
                error_msg = f"Failed to delete {reason} object {name}: {e}"
                logger.warning(error_msg)
                report.errors.append(error_msg)
                continue

            if not removed:
                # Lost a race with another deleter
                continue
            if reason == "malformed":
                report.malformed_removed += 1
            else:
                report.expired_removed += 1
            logger.info(f"Deleted {reason} object: {name}")
            if metadata is not None:
                self._forget(metadata.identifier)

        self._purge_stale_uploads(report)
        self._purge_orphan_markers(report)

        logger.info(
            f"Sweep completed - Scanned: {report.scanned}, "
            f"Expired: {report.expired_removed}, "
            f"Malformed: {report.malformed_removed}, "
            f"Stale uploads: {report.stale_uploads_removed}, "
            f"Markers: {report.markers_removed}, "
            f"Errors: {len(report.errors)}"
        )
        return report

    def _purge_stale_uploads(self, report: SweepReport) -> None:
        try:
            staged = self.store.list_staged()
        except StoreIOError as e:
            error_msg = f"Failed to list staged uploads: {e}"
            logger.warning(error_msg)
            report.errors.append(error_msg)
            return

        now = self.policy.now()
        for temp_name in staged:
            try:
                stat = self.store.stat_staged(temp_name)
                if stat is None or now - stat.modified_at <= self.stale_upload_age:
                    continue
                if self.store.discard_staged(temp_name):
                    report.stale_uploads_removed += 1
                    logger.info(f"Removed stale staged upload: {temp_name}")
            except StoreIOError as e:
                error_msg = f"Failed to remove staged upload {temp_name}: {e}"
                logger.warning(error_msg)
                report.errors.append(error_msg)

    def _purge_orphan_markers(self, report: SweepReport) -> None:
        try:
            markers = self.store.list_protected()
            live = self._identifiers_on_disk()
        except StoreIOError as e:
            error_msg = f"Failed to list protection markers: {e}"
            logger.warning(error_msg)
            report.errors.append(error_msg)
            return

        now = self.policy.now()
        for identifier in markers:
            if identifier in live:
                continue
            try:
                stat = self.store.stat_protected(identifier)
                # Young markers may belong to an upload that is still publishing
                if stat is None or now - stat.modified_at <= self.stale_upload_age:
                    continue
            except StoreIOError as e:
                error_msg = f"Failed to inspect protection marker {identifier}: {e}"
                logger.warning(error_msg)
                report.errors.append(error_msg)
                continue
            if self._forget(identifier):
                report.markers_removed += 1
                logger.info(f"Removed orphaned protection marker: {identifier}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _find(self, identifier: str) -> Optional[Tuple[str, ObjectMetadata]]:
        if not identifier or DELIMITER in identifier:
            return None
        for name in self.store.list():
            metadata = self.codec.decode(name)
            if metadata is not None and metadata.identifier == identifier:
                return name, metadata
        return None

    def _identifiers_on_disk(self) -> Set[str]:
        identifiers = set()
        for name in self.store.list():
            identifier = self.codec.identifier_of(name)
            if identifier:
                identifiers.add(identifier)
        return identifiers

    def _delete_quietly(self, name: str, identifier: str, reason: str) -> None:
        try:
            if self.store.delete(name):
                logger.info(f"Deleted object ({reason}): {name}")
                self._forget(identifier)
        except (StoreIOError, ValueError) as e:
            logger.warning(f"Failed to delete object ({reason}) {name}: {e}")

    def _forget(self, identifier: str) -> bool:
        """
        Drop the protection marker of a removed object and notify listeners.

        Returns:
            True if a marker was removed
        """
        unmarked = False
        try:
            unmarked = self.store.unmark_protected(identifier)
        except (StoreIOError, ValueError) as e:
            logger.warning(f"Failed to remove protection marker {identifier}: {e}")

        for listener in self._delete_listeners:
            try:
                listener(identifier)
            except Exception as e:
                logger.warning(f"Delete listener failed for {identifier}: {e}")
        return unmarked

    def _discard_staged_quietly(self, temp_name: str) -> None:
        try:
            self.store.discard_staged(temp_name)
        except StoreIOError as e:
            logger.warning(f"Failed to discard staged upload {temp_name}: {e}")
