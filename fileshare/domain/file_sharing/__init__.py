"""
File Sharing Domain

Ephemeral shared objects: identifiers, expiration, name encoding and the
lifecycle manager that resolves, serves and sweeps them.
"""

from .entities import StoredObject, SweepReport
from .expiration_policy import ExpirationPolicy
from .identifier_allocator import IdentifierAllocator
from .object_key_codec import ObjectKeyCodec
from .repositories import PassphraseRepository
from .services import LifecycleManager, ObjectStream
from .storage_repository import IObjectStore
from .value_objects import ExpirationToken, ObjectMetadata, ObjectStat

__all__ = [
    "ExpirationPolicy",
    "ExpirationToken",
    "IdentifierAllocator",
    "IObjectStore",
    "LifecycleManager",
    "ObjectKeyCodec",
    "ObjectMetadata",
    "ObjectStat",
    "ObjectStream",
    "PassphraseRepository",
    "StoredObject",
    "SweepReport",
]
