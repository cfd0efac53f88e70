"""
API Namespaces - Organized endpoint groups
"""

from flask import current_app, request
from flask_restx import Namespace, Resource
from werkzeug.exceptions import RequestEntityTooLarge

from fileshare.api.responses import (
    PASSPHRASE_HEADER,
    domain_error_response,
    download_response,
    request_base_url,
)
from fileshare.api.v1 import api
from fileshare.api.v1.models import (
    error_response,
    file_info,
    file_summary,
    upload_parser,
    upload_response,
)
from fileshare.domain.errors import (
    DomainError,
    ErrorCategory,
    ObjectNotFoundError,
    create_error_response,
)


def _share_service():
    return getattr(current_app, "share_service", None)


def _service_unavailable():
    return create_error_response(
        ErrorCategory.SYSTEM_ERROR,
        "Share service not initialized",
        status_code=503,
    )


@api.errorhandler(RequestEntityTooLarge)
def handle_too_large(error):
    """Upload body exceeds MAX_UPLOAD_MB."""
    return create_error_response(
        ErrorCategory.FILE_TOO_LARGE, str(error.description), status_code=413
    )


# =============================================================================
# Files Namespace - Upload, listing, info and download
# =============================================================================

files_ns = Namespace("files", description="Shared file operations")


@files_ns.route("")
class Files(Resource):
    """Upload and list shared files"""

    @files_ns.doc("list_files")
    @files_ns.response(200, "Success", [file_summary])
    @files_ns.response(503, "Service Unavailable", error_response)
    def get(self):
        """
        List live files

        Expired and undecodable entries are left out; the sweep removes them.
        """
        share_service = _share_service()
        if share_service is None:
            return _service_unavailable()

        try:
            return share_service.list_files(request_base_url()), 200
        except DomainError as e:
            current_app.logger.error(f"[FILES] Error listing files: {e}")
            return domain_error_response(e)

    @files_ns.doc("upload_file")
    @files_ns.expect(upload_parser)
    @files_ns.response(201, "Created", upload_response)
    @files_ns.response(400, "No File Provided", error_response)
    @files_ns.response(413, "File Too Large", error_response)
    @files_ns.response(500, "Upload Failed", error_response)
    def post(self):
        """
        Upload a file and get a short share link

        Multipart form fields: file, password, singleDownload ("true"), and
        expiration (1h, 6h, 24h or 72h; anything else means 1h).
        """
        share_service = _share_service()
        if share_service is None:
            return _service_unavailable()

        upload = request.files.get("file")
        if upload is None or not upload.filename:
            return create_error_response(
                ErrorCategory.NO_FILE_PROVIDED,
                "Missing 'file' in multipart form",
                status_code=400,
            )

        form = request.form
        try:
            result = share_service.upload(
                upload.stream,
                upload.filename,
                password=form.get("password") or None,
                single_download=form.get("singleDownload") == "true",
                expiration=form.get("expiration") or "1h",
                base_url=request_base_url(),
            )
        except DomainError as e:
            current_app.logger.error(f"[UPLOAD] Failed to store {upload.filename!r}: {e}")
            return domain_error_response(e)

        current_app.logger.info(
            f"[UPLOAD] Stored {result['identifier']} ({result['size']} bytes)"
        )
        return result, 201


@files_ns.route("/<string:identifier>")
@files_ns.param("identifier", "The public file identifier")
class FileInfo(Resource):
    """Information about one shared file"""

    @files_ns.doc("get_file_info")
    @files_ns.response(200, "Success", file_info)
    @files_ns.response(404, "File Not Found", error_response)
    @files_ns.response(410, "File Expired", error_response)
    @files_ns.response(503, "Service Unavailable", error_response)
    def get(self, identifier):
        """
        Get file information

        Looking up an expired file deletes it and answers 410.
        """
        share_service = _share_service()
        if share_service is None:
            return _service_unavailable()

        try:
            return share_service.get_file_info(identifier, request_base_url()), 200
        except ObjectNotFoundError as e:
            return domain_error_response(e)
        except DomainError as e:
            current_app.logger.error(f"[FILES] Error describing {identifier}: {e}")
            return domain_error_response(e)


@files_ns.route("/<string:identifier>/download")
@files_ns.param("identifier", "The public file identifier")
class FileDownload(Resource):
    """Download the bytes of one shared file"""

    @files_ns.doc("download_file", params={PASSPHRASE_HEADER: {"in": "header", "type": "string"}})
    @files_ns.response(200, "File content")
    @files_ns.response(403, "Passphrase Required", error_response)
    @files_ns.response(404, "File Not Found", error_response)
    @files_ns.response(410, "File Expired", error_response)
    @files_ns.response(503, "Service Unavailable", error_response)
    def get(self, identifier):
        """
        Download a file

        Single-download files are deleted once the whole file has been sent.
        """
        return download_response(identifier)
