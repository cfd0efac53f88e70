"""
Object Key Codec

Serializes object metadata into the stored object's name and back.

Name layout::

    {identifier}-{YYYYMMDDHH}-{true|false}-{original_name}

The original name is always the last segment and is the only one allowed to
contain the delimiter. Decoding splits off the first three segments and
rejoins the rest, so "a-b.txt" survives a round trip. An original name that
itself looks like "<stamp>-<flag>-<name>" cannot be told apart from a real
prefix when read in isolation; that ambiguity is accepted, not guessed away.
"""

import os
import unicodedata
from typing import Optional

from ..errors import MalformedObjectNameError
from .expiration_policy import ExpirationPolicy
from .value_objects import ObjectMetadata

DELIMITER = "-"
TRUE_FLAG = "true"
FALSE_FLAG = "false"

# Most filesystems cap a single path component at 255 bytes
MAX_NAME_BYTES = 255
# identifier (12 + 4 suffix digits) + stamp + longest flag + delimiters
RESERVED_PREFIX_BYTES = 40
MAX_EXTENSION_BYTES = 20
FALLBACK_NAME = "upload"


class ObjectKeyCodec:
    """Encodes ObjectMetadata into storage names and decodes them back."""

    def __init__(self, max_name_bytes: int = MAX_NAME_BYTES):
        self.max_name_bytes = max_name_bytes

    def encode(self, metadata: ObjectMetadata) -> str:
        """
        Encode metadata into a storage name.

        Args:
            metadata: Metadata of the object being stored

        Returns:
            Storage name

        Raises:
            MalformedObjectNameError: If a field cannot be represented
        """
        identifier = metadata.identifier
        if not identifier or DELIMITER in identifier or os.sep in identifier:
            raise MalformedObjectNameError(f"Invalid identifier: {identifier!r}")
        if metadata.expires_at is None:
            raise MalformedObjectNameError("Expiration instant is required")
        if not metadata.original_name or "/" in metadata.original_name:
            raise MalformedObjectNameError(
                f"Invalid original name: {metadata.original_name!r}"
            )

        flag = TRUE_FLAG if metadata.single_download else FALSE_FLAG
        stamp = ExpirationPolicy.format_stamp(metadata.expires_at)
        return DELIMITER.join([identifier, stamp, flag, metadata.original_name])

    def decode(self, name: str) -> Optional[ObjectMetadata]:
        """
        Decode a storage name.

        Fails closed: anything that is not a well-formed name yields None
        rather than an exception. A stamp that does not parse still decodes,
        with ``expires_at=None`` so the object is treated as expired.

        Args:
            name: Storage name as listed by the store

        Returns:
            ObjectMetadata, or None for undecodable names
        """
        if not name:
            return None

        parts = name.split(DELIMITER, 3)
        if len(parts) < 4:
            return None

        identifier, stamp, flag, original_name = parts
        if not identifier or not original_name:
            return None
        if flag not in (TRUE_FLAG, FALSE_FLAG):
            return None

        return ObjectMetadata(
            identifier=identifier,
            expires_at=ExpirationPolicy.parse_stamp(stamp),
            single_download=flag == TRUE_FLAG,
            original_name=original_name,
        )

    def identifier_of(self, name: str) -> Optional[str]:
        """Identifier of a well-formed name, or None."""
        metadata = self.decode(name)
        return metadata.identifier if metadata else None

    def normalize_original_name(self, filename: Optional[str]) -> str:
        """
        Make an uploaded filename safe to embed in a storage name.

        Drops directory components and control characters, substitutes a
        fallback for empty names, and shortens the stem (keeping the
        extension) so the encoded name fits in one path component.

        Args:
            filename: Filename as sent by the client

        Returns:
            Sanitized filename
        """
        name = (filename or "").replace("\\", "/").split("/")[-1]
        name = "".join(c for c in name if not unicodedata.category(c).startswith("C"))
        name = name.strip()

        if name in ("", ".", ".."):
            return FALLBACK_NAME

        budget = self.max_name_bytes - RESERVED_PREFIX_BYTES
        if len(name.encode("utf-8")) <= budget:
            return name

        stem, extension = os.path.splitext(name)
        if len(extension.encode("utf-8")) > MAX_EXTENSION_BYTES:
            stem, extension = name, ""
        stem = _truncate_utf8(stem, budget - len(extension.encode("utf-8")))
        return (stem or FALLBACK_NAME) + extension


def _truncate_utf8(value: str, max_bytes: int) -> str:
    """Cut a string to at most max_bytes without splitting a character."""
    return value.encode("utf-8")[:max(max_bytes, 0)].decode("utf-8", errors="ignore")
