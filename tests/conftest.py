"""
Shared pytest fixtures for the FileShare test suite.

Provides a controllable clock, store and lifecycle-manager fixtures, and a
Flask app wired to a temporary store and the in-memory passphrase backend.
Tests are marked unit/integration/property by the directory they live in.
"""

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from hypothesis import HealthCheck, settings

from fileshare.app_factory import AppConfig, create_app
from fileshare.config.storage_config import StorageConfig
from fileshare.domain.file_sharing import (
    ExpirationPolicy,
    IdentifierAllocator,
    LifecycleManager,
    ObjectKeyCodec,
)
from fileshare.infrastructure import LocalObjectStore

# HYPOTHESIS_PROFILE=ci runs more examples per property
settings.register_profile(
    "default", max_examples=100, deadline=None, suppress_health_check=[HealthCheck.too_slow]
)
settings.register_profile(
    "ci", max_examples=300, deadline=None, suppress_health_check=[HealthCheck.too_slow]
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


# -----------------------------------------------------------------------------
# Time-related Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def fixed_now() -> datetime:
    """A fixed, hour-aligned instant."""
    return datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


# -----------------------------------------------------------------------------
# Domain Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def policy(clock) -> ExpirationPolicy:
    return ExpirationPolicy(clock=clock)


@pytest.fixture
def codec() -> ObjectKeyCodec:
    return ObjectKeyCodec()


@pytest.fixture
def allocator() -> IdentifierAllocator:
    return IdentifierAllocator()


@pytest.fixture
def store(tmp_path) -> LocalObjectStore:
    """Object store rooted in a pytest-managed temporary directory."""
    return LocalObjectStore(base_path=str(tmp_path / "uploads"))


@pytest.fixture
def lifecycle_manager(store, codec, policy, allocator) -> LifecycleManager:
    return LifecycleManager(store, codec, policy, allocator, chunk_size=4)


# -----------------------------------------------------------------------------
# Flask Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def storage_config(tmp_path) -> StorageConfig:
    config = StorageConfig()
    config.storage_dir = str(tmp_path / "uploads")
    config.public_base_url = None
    config.sweep_in_process = False
    config.max_upload_mb = 1
    return config


@pytest.fixture
def app_config(monkeypatch) -> AppConfig:
    monkeypatch.setenv("PASSPHRASE_BACKEND", "memory")
    return AppConfig()


@pytest.fixture
def app(app_config, storage_config, clock, monkeypatch):
    """Flask app on a temporary store with a controllable clock."""
    monkeypatch.setattr(
        "fileshare.domain.file_sharing.expiration_policy.utc_now", clock
    )
    flask_app = create_app(app_config, storage_config)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


# -----------------------------------------------------------------------------
# Collection
# -----------------------------------------------------------------------------

_SUITE_MARKERS = {
    "unit": pytest.mark.unit,
    "integration": pytest.mark.integration,
    "property": pytest.mark.property,
}


def pytest_collection_modifyitems(config, items):
    tests_root = Path(__file__).parent
    for item in items:
        suite = Path(str(item.fspath)).relative_to(tests_root).parts[0]
        if suite in _SUITE_MARKERS:
            item.add_marker(_SUITE_MARKERS[suite])
