"""
Unit tests for IdentifierAllocator.
"""

import string
import threading
from unittest.mock import patch

import pytest

from fileshare.domain.file_sharing import IdentifierAllocator


def test_identifiers_use_letters_within_length_bounds():
    allocator = IdentifierAllocator()

    for _ in range(500):
        identifier = allocator.allocate()
        assert 5 <= len(identifier) <= 12
        assert set(identifier) <= set(string.ascii_letters)


def test_identifiers_are_unique_within_process():
    allocator = IdentifierAllocator(min_length=3, max_length=3)

    identifiers = [allocator.allocate() for _ in range(2000)]

    assert len(set(identifiers)) == len(identifiers)


def test_allocated_identifiers_are_remembered():
    allocator = IdentifierAllocator()
    identifier = allocator.allocate()

    assert allocator.is_allocated(identifier)

    allocator.release(identifier)
    assert not allocator.is_allocated(identifier)


def test_in_use_check_rejects_candidates():
    allocator = IdentifierAllocator(min_length=1, max_length=1)
    taken = set(string.ascii_letters) - {"q"}

    assert allocator.allocate(in_use=taken.__contains__) == "q"


def test_falls_back_to_time_suffix_when_space_is_exhausted():
    allocator = IdentifierAllocator(min_length=1, max_length=1, max_attempts=10)

    with patch("fileshare.domain.file_sharing.identifier_allocator.time.time",
               return_value=1700000001.5):
        identifier = allocator.allocate(in_use=lambda candidate: True)

    assert len(identifier) == 5
    assert identifier[0] in string.ascii_letters
    assert identifier[1:] == "1500"
    assert allocator.is_allocated(identifier)


def test_concurrent_allocation_never_repeats():
    allocator = IdentifierAllocator(min_length=4, max_length=4)
    results = []
    lock = threading.Lock()

    def worker():
        minted = [allocator.allocate() for _ in range(200)]
        with lock:
            results.extend(minted)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 1600
    assert len(set(results)) == 1600


@pytest.mark.parametrize(
    "kwargs",
    [
        {"min_length": 0},
        {"min_length": 6, "max_length": 5},
        {"max_attempts": 0},
    ],
)
def test_rejects_invalid_configuration(kwargs):
    with pytest.raises(ValueError):
        IdentifierAllocator(**kwargs)
