"""
Errors

Domain exceptions raised by the file-sharing core, and the categories and
user-facing texts the API turns them into.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Machine-readable ``error`` values of API error bodies."""

    NO_FILE_PROVIDED = "no_file_provided"
    FILE_TOO_LARGE = "file_too_large"
    UPLOAD_FAILED = "upload_failed"
    FILE_NOT_FOUND = "file_not_found"
    FILE_EXPIRED = "file_expired"
    PASSPHRASE_REQUIRED = "passphrase_required"
    SERVICE_UNAVAILABLE = "service_unavailable"
    SYSTEM_ERROR = "system_error"


# Title, explanation and next step shown to the person holding the link
ERROR_MESSAGES: Dict[ErrorCategory, Dict[str, str]] = {
    ErrorCategory.NO_FILE_PROVIDED: {
        "title": "No File Uploaded",
        "message": "The upload did not contain a file.",
        "action": "Choose a file and try the upload again.",
    },
    ErrorCategory.FILE_TOO_LARGE: {
        "title": "File Too Large",
        "message": "The uploaded file exceeds the maximum allowed size.",
        "action": "Try a smaller file or split it into several uploads.",
    },
    ErrorCategory.UPLOAD_FAILED: {
        "title": "Upload Failed",
        "message": "The file could not be stored on the server.",
        "action": "Try the upload again. If it keeps failing, tell the administrator.",
    },
    ErrorCategory.FILE_NOT_FOUND: {
        "title": "File Not Found",
        "message": "No file is shared under this link.",
        "action": "Check the link or ask the sender for a new one.",
    },
    ErrorCategory.FILE_EXPIRED: {
        "title": "File Expired",
        "message": "This file has expired and is no longer available.",
        "action": "Ask the sender to upload the file again.",
    },
    ErrorCategory.PASSPHRASE_REQUIRED: {
        "title": "Passphrase Required",
        "message": "This file is protected and the passphrase is missing or incorrect.",
        "action": "Enter the passphrase you received together with the link.",
    },
    ErrorCategory.SERVICE_UNAVAILABLE: {
        "title": "Service Unavailable",
        "message": "A backing service needed for this request is not reachable.",
        "action": "Wait a few minutes and retry.",
    },
    ErrorCategory.SYSTEM_ERROR: {
        "title": "System Error",
        "message": "Something went wrong on the server.",
        "action": "Retry later.",
    },
}


# ----------------------------------------------------------------------------
# Domain exceptions
# ----------------------------------------------------------------------------

class DomainError(Exception):
    """Root of the domain exceptions; ``original_error`` keeps the cause."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error


class MalformedObjectNameError(DomainError):
    """
    Metadata that cannot be encoded into an object name.

    Only encoding raises it. Decoding reports bad names as absent.
    """


class ObjectNotFoundError(DomainError):
    """No live object carries the requested identifier."""


class ExpiredObjectError(ObjectNotFoundError):
    """
    The matching object has expired and was deleted on lookup.

    Catching ObjectNotFoundError also catches this one.
    """


class StoreIOError(DomainError):
    """The object store failed to read, write, list or delete."""


class UploadError(DomainError):
    """An upload did not become a live object."""


class PassphraseRequiredError(DomainError):
    """A protected object was requested without the right passphrase."""


class PassphraseStoreError(DomainError):
    """The passphrase repository could not be reached."""


# ----------------------------------------------------------------------------
# API error bodies
# ----------------------------------------------------------------------------

class ApplicationError(Exception):
    """An error category with its user-facing texts and optional details."""

    def __init__(self, category: ErrorCategory, technical_message: Optional[str] = None):
        texts = ERROR_MESSAGES.get(category, ERROR_MESSAGES[ErrorCategory.SYSTEM_ERROR])
        self.category = category
        self.technical_message = technical_message or ""
        self.title = texts["title"]
        self.message = texts["message"]
        self.action = texts["action"]
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body = {
            "error": self.category.value,
            "title": self.title,
            "message": self.message,
            "action": self.action,
        }
        if self.technical_message:
            body["details"] = self.technical_message
        return body


def create_error_response(
    category: ErrorCategory,
    technical_message: Optional[str] = None,
    status_code: int = 400,
) -> tuple[Dict[str, Any], int]:
    """
    Build an ``(error_body, status_code)`` pair for a Flask view to return.

    Args:
        category: Error category
        technical_message: Goes into ``details`` when given
        status_code: HTTP status code
    """
    return ApplicationError(category, technical_message).to_dict(), status_code
