"""
API Models for response documentation
"""

from flask_restx import fields
from werkzeug.datastructures import FileStorage

from fileshare.api.v1 import api

# =============================================================================
# Request Parsers
# =============================================================================

upload_parser = api.parser()
upload_parser.add_argument(
    "file", location="files", type=FileStorage, required=True, help="File to share"
)
upload_parser.add_argument(
    "password", location="form", required=False, help="Optional passphrase"
)
upload_parser.add_argument(
    "singleDownload",
    location="form",
    required=False,
    help='"true" to delete the file after its first complete download',
)
upload_parser.add_argument(
    "expiration",
    location="form",
    required=False,
    choices=("1h", "6h", "24h", "72h"),
    help="Lifetime of the link (default 1h)",
)

# =============================================================================
# Response Models
# =============================================================================

upload_settings = api.model(
    "UploadSettings",
    {
        "password_protected": fields.Boolean(description="Passphrase required to download"),
        "singleDownload": fields.Boolean(description="Deleted after the first download"),
        "expiration": fields.String(description="Expiration token", example="24h"),
    },
)

upload_response = api.model(
    "UploadResponse",
    {
        "success": fields.Boolean(description="Upload stored"),
        "filename": fields.String(description="Original filename"),
        "identifier": fields.String(description="Public identifier", example="aBcDeF"),
        "url": fields.String(description="Short share link"),
        "size": fields.Integer(description="Size in bytes"),
        "expires_at": fields.DateTime(description="Expiration instant (UTC)"),
        "settings": fields.Nested(upload_settings),
    },
)

file_summary = api.model(
    "FileSummary",
    {
        "name": fields.String(description="Original filename"),
        "identifier": fields.String(description="Public identifier"),
        "size": fields.Integer(description="Size in bytes"),
        "upload_date": fields.DateTime(description="Upload time (UTC)"),
        "expires_at": fields.DateTime(description="Expiration instant (UTC)"),
        "expired": fields.Boolean(description="Always false for listed files"),
        "single_download": fields.Boolean(description="Deleted after the first download"),
        "url": fields.String(description="Short share link"),
    },
)

file_info = api.model(
    "FileInfo",
    {
        "identifier": fields.String(description="Public identifier"),
        "name": fields.String(description="Original filename"),
        "size": fields.Integer(description="Size in bytes"),
        "size_mb": fields.Float(description="Size in megabytes"),
        "expires_at": fields.DateTime(description="Expiration instant (UTC)"),
        "single_download": fields.Boolean(description="Deleted after the first download"),
        "password_protected": fields.Boolean(description="Passphrase required to download"),
        "download_url": fields.String(description="Short link serving the bytes"),
    },
)

error_response = api.model(
    "ErrorResponse",
    {
        "error": fields.String(description="Error category"),
        "title": fields.String(description="Short error title"),
        "message": fields.String(description="User-facing message"),
        "action": fields.String(description="Suggested action"),
        "details": fields.String(description="Technical details", allow_null=True),
    },
)
