"""
Short Links

Serves the bytes of a shared file at "/{identifier}", the link handed out
on upload.
"""

from flask import Blueprint

from fileshare.api.responses import download_response

short_links_bp = Blueprint("short_links", __name__)


@short_links_bp.route("/<string:identifier>", methods=["GET"])
def serve_short_link(identifier):
    """Stream the file behind a short link."""
    return download_response(identifier)
