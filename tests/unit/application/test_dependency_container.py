"""
Unit tests for DependencyContainer.
"""

import threading
from unittest.mock import Mock

import pytest

from fileshare.application import DependencyContainer, DependencyNotFoundError, ShareService
from fileshare.domain.file_sharing import IObjectStore, LifecycleManager


@pytest.fixture
def container():
    return DependencyContainer()


def test_registered_instance_is_returned_every_time(container):
    manager = Mock(spec=LifecycleManager)
    container.register_singleton(LifecycleManager, manager)

    assert container.resolve(LifecycleManager) is manager
    assert container.resolve(LifecycleManager) is manager
    assert container.is_registered(LifecycleManager)
    assert len(container) == 1


def test_unknown_type(container):
    with pytest.raises(DependencyNotFoundError, match="IObjectStore"):
        container.resolve(IObjectStore)

    assert not container.is_registered(IObjectStore)


def test_not_found_is_a_lookup_error():
    assert issubclass(DependencyNotFoundError, LookupError)


def test_override_until_cleared(container):
    real = Mock(spec=ShareService)
    stand_in = Mock(spec=ShareService)
    container.register_singleton(ShareService, real)

    container.override(ShareService, stand_in)
    assert container.resolve(ShareService) is stand_in
    assert len(container) == 1

    container.clear_overrides()
    assert container.resolve(ShareService) is real


def test_override_without_registration(container):
    store = Mock(spec=IObjectStore)

    container.override(IObjectStore, store)

    assert container.is_registered(IObjectStore)
    assert container.resolve(IObjectStore) is store
    assert len(container) == 0


def test_resolution_from_many_threads(container):
    manager = Mock(spec=LifecycleManager)
    container.register_singleton(LifecycleManager, manager)
    seen = []

    def resolve_repeatedly():
        for _ in range(200):
            seen.append(container.resolve(LifecycleManager))

    workers = [threading.Thread(target=resolve_repeatedly) for _ in range(8)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()

    assert len(seen) == 1600
    assert all(instance is manager for instance in seen)
