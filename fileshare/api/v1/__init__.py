"""
API v1

Blueprint and flask-restx Api for the versioned endpoints. The interactive
Swagger UI is served at /api/v1/docs.
"""

import os

from flask import Blueprint
from flask_restx import Api

API_VERSION = os.getenv("API_VERSION", "v1")

api_v1_bp = Blueprint("api_v1", __name__, url_prefix=f"/api/{API_VERSION}")

api = Api(
    api_v1_bp,
    version="1.0",
    title="FileShare API",
    description="Ephemeral file sharing with short links, expiration and single-download files",
    doc="/docs",
)

# namespaces imports `api` from this module
from .namespaces import files_ns  # noqa: E402

api.add_namespace(files_ns, path="/files")
