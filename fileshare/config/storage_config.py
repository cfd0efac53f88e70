"""
Storage Configuration

Settings for the object store, identifier minting and the expiration sweep.
"""

import os
from typing import Optional


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class StorageConfig:
    """Object store and lifecycle settings read from the environment."""

    def __init__(self):
        self.storage_dir = os.getenv("STORAGE_DIR", "/tmp/fileshare/uploads")
        self.max_upload_mb = int(os.getenv("MAX_UPLOAD_MB", 50))

        # Unset means links are built from the request host URL
        self.public_base_url: Optional[str] = os.getenv("PUBLIC_BASE_URL") or None

        self.identifier_min_length = int(os.getenv("IDENTIFIER_MIN_LENGTH", 5))
        self.identifier_max_length = int(os.getenv("IDENTIFIER_MAX_LENGTH", 12))
        self.identifier_max_attempts = int(os.getenv("IDENTIFIER_MAX_ATTEMPTS", 1000))

        self.sweep_interval_seconds = int(os.getenv("SWEEP_INTERVAL_SECONDS", 3600))
        self.sweep_in_process = _env_bool("SWEEP_IN_PROCESS", "true")
        self.stale_upload_seconds = int(os.getenv("STALE_UPLOAD_SECONDS", 3600))
        self.download_chunk_size = int(os.getenv("DOWNLOAD_CHUNK_SIZE", 64 * 1024))

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024
