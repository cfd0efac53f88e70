"""
Unit tests for environment-driven configuration.
"""

import logging

from fileshare.app_factory import AppConfig
from fileshare.config.logging_config import PassphraseMaskingFilter, setup_logging
from fileshare.config.redis_config import RedisConfig
from fileshare.config.storage_config import StorageConfig


class TestStorageConfig:

    def test_defaults(self, monkeypatch):
        for name in ("STORAGE_DIR", "MAX_UPLOAD_MB", "PUBLIC_BASE_URL",
                     "SWEEP_INTERVAL_SECONDS", "SWEEP_IN_PROCESS"):
            monkeypatch.delenv(name, raising=False)

        config = StorageConfig()

        assert config.storage_dir == "/tmp/fileshare/uploads"
        assert config.max_upload_mb == 50
        assert config.max_upload_bytes == 50 * 1024 * 1024
        assert config.public_base_url is None
        assert config.identifier_min_length == 5
        assert config.identifier_max_length == 12
        assert config.identifier_max_attempts == 1000
        assert config.sweep_interval_seconds == 3600
        assert config.sweep_in_process is True
        assert config.stale_upload_seconds == 3600
        assert config.download_chunk_size == 65536

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("MAX_UPLOAD_MB", "5")
        monkeypatch.setenv("PUBLIC_BASE_URL", "https://share.example.com")
        monkeypatch.setenv("SWEEP_IN_PROCESS", "False")

        config = StorageConfig()

        assert config.max_upload_bytes == 5 * 1024 * 1024
        assert config.public_base_url == "https://share.example.com"
        assert config.sweep_in_process is False


def test_app_config(monkeypatch):
    monkeypatch.setenv("PASSPHRASE_BACKEND", "Memory")

    config = AppConfig()

    assert config.passphrase_backend == "memory"


def test_redis_url_overrides_parts(monkeypatch):
    monkeypatch.setenv("REDIS_URL", "redis://:pw@cache.internal:6380/2")

    config = RedisConfig()

    assert config.host == "cache.internal"
    assert config.port == 6380
    assert config.db == 2
    assert config.password == "pw"


class TestPassphraseMaskingFilter:

    def _record(self, msg, args=()):
        return logging.LogRecord("fileshare", logging.INFO, __file__, 1, msg, args, None)

    def test_masks_message(self):
        record = self._record("upload form password=hunter2 expiration=1h")

        PassphraseMaskingFilter().filter(record)

        assert "hunter2" not in record.getMessage()
        assert "expiration=1h" in record.getMessage()

    def test_masks_args(self):
        record = self._record("headers: %s", ("X-File-Password: hunter2",))

        PassphraseMaskingFilter().filter(record)

        assert "hunter2" not in record.getMessage()

    def test_other_messages_untouched(self):
        record = self._record("Stored object aBcDe (notes.txt)")

        assert PassphraseMaskingFilter().filter(record) is True
        assert record.getMessage() == "Stored object aBcDe (notes.txt)"


def test_setup_logging_is_idempotent():
    logger = setup_logging("DEBUG")
    handlers = list(logger.handlers)

    assert setup_logging() is logger
    assert logger.handlers == handlers
    assert any(
        isinstance(f, PassphraseMaskingFilter) for h in logger.handlers for f in h.filters
    )
