"""
Shared response helpers for the REST API and the short-link route.
"""

import unicodedata
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

from flask import Response, current_app, request

from fileshare.domain.errors import (
    DomainError,
    ErrorCategory,
    ExpiredObjectError,
    ObjectNotFoundError,
    PassphraseRequiredError,
    PassphraseStoreError,
    UploadError,
    create_error_response,
)

PASSPHRASE_HEADER = "X-File-Password"


def content_disposition(filename: str) -> str:
    """
    Build an attachment Content-Disposition header for a filename.

    Non-ASCII names get an ASCII fallback plus an RFC 5987 filename*.
    """
    escaped = filename.replace("\\", "\\\\").replace('"', '\\"')
    try:
        escaped.encode("ascii")
    except UnicodeEncodeError:
        simple = unicodedata.normalize("NFKD", escaped)
        simple = simple.encode("ascii", "ignore").decode("ascii") or "download"
        quoted = quote(filename, safe="!#$&+^`|")
        return f"attachment; filename=\"{simple}\"; filename*=UTF-8''{quoted}"
    return f'attachment; filename="{escaped}"'


def request_base_url() -> str:
    """Scheme and host of the current request, without a trailing slash."""
    return request.host_url.rstrip("/")


def request_passphrase() -> Optional[str]:
    """Passphrase from the X-File-Password header or the password query arg."""
    return request.headers.get(PASSPHRASE_HEADER) or request.args.get("password")


def domain_error_response(error: DomainError) -> Tuple[Dict[str, Any], int]:
    """Map a domain error to a structured error response."""
    if isinstance(error, ExpiredObjectError):
        return create_error_response(ErrorCategory.FILE_EXPIRED, str(error), status_code=410)
    if isinstance(error, ObjectNotFoundError):
        return create_error_response(ErrorCategory.FILE_NOT_FOUND, str(error), status_code=404)
    if isinstance(error, PassphraseRequiredError):
        return create_error_response(ErrorCategory.PASSPHRASE_REQUIRED, status_code=403)
    if isinstance(error, PassphraseStoreError):
        return create_error_response(
            ErrorCategory.SERVICE_UNAVAILABLE, str(error), status_code=503
        )
    if isinstance(error, UploadError):
        if isinstance(error.original_error, PassphraseStoreError):
            return create_error_response(
                ErrorCategory.SERVICE_UNAVAILABLE, str(error), status_code=503
            )
        return create_error_response(ErrorCategory.UPLOAD_FAILED, str(error), status_code=500)
    return create_error_response(ErrorCategory.SYSTEM_ERROR, str(error), status_code=500)


def download_response(identifier: str):
    """
    Resolve an identifier and stream its bytes as an attachment.

    Returns:
        A streaming Response, or an (error_dict, status_code) tuple
    """
    share_service = getattr(current_app, "share_service", None)
    if share_service is None:
        return create_error_response(
            ErrorCategory.SYSTEM_ERROR,
            "Share service not initialized",
            status_code=503,
        )

    try:
        handle = share_service.open_download(identifier, request_passphrase())
    except (ObjectNotFoundError, PassphraseRequiredError) as e:
        current_app.logger.info(f"[DOWNLOAD] {identifier}: {e}")
        return domain_error_response(e)
    except DomainError as e:
        current_app.logger.error(f"[DOWNLOAD] Error serving {identifier}: {e}")
        return domain_error_response(e)

    stored = handle.stored
    return Response(
        handle.chunks,
        mimetype="application/octet-stream",
        headers={
            "Content-Disposition": content_disposition(stored.original_name),
            "Content-Length": str(stored.size_bytes),
            "Cache-Control": "no-store",
        },
    )
