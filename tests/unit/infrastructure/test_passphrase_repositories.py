"""
Unit tests for passphrase repositories and the Redis JSON helpers.

Redis is replaced by a Mock client; no server is needed.
"""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from fileshare.domain.errors import PassphraseStoreError
from fileshare.infrastructure import (
    InMemoryPassphraseRepository,
    RedisPassphraseRepository,
    RedisRepository,
)


@pytest.fixture
def redis_client():
    client = Mock()
    client.setex.return_value = True
    client.get.return_value = None
    client.delete.return_value = 1
    return client


@pytest.fixture
def redis_repo(redis_client):
    return RedisRepository(redis_client, key_prefix="fileshare")


class TestRedisRepository:

    def test_keys_are_prefixed(self, redis_repo):
        assert redis_repo._make_key("passphrase:abc") == "fileshare:passphrase:abc"
        assert RedisRepository(Mock())._make_key("plain") == "plain"

    def test_set_json_with_ttl(self, redis_repo, redis_client):
        assert redis_repo.set_json("k", {"a": 1}, ttl=60) is True

        redis_client.setex.assert_called_once_with("fileshare:k", 60, json.dumps({"a": 1}))

    def test_set_json_without_ttl(self, redis_repo, redis_client):
        redis_client.set.return_value = True

        assert redis_repo.set_json("k", {"a": 1}) is True
        redis_client.set.assert_called_once()

    def test_set_json_connection_error(self, redis_repo, redis_client):
        redis_client.setex.side_effect = RedisConnectionError("down")

        assert redis_repo.set_json("k", {"a": 1}, ttl=5) is False

    def test_get_json_decodes_bytes(self, redis_repo, redis_client):
        redis_client.get.return_value = b'{"hash": "x"}'

        assert redis_repo.get_json("k") == {"hash": "x"}

    def test_get_json_bad_payload(self, redis_repo, redis_client):
        redis_client.get.return_value = b"not json"

        assert redis_repo.get_json("k") is None

    def test_get_json_propagates_connection_errors(self, redis_repo, redis_client):
        redis_client.get.side_effect = RedisConnectionError("down")

        with pytest.raises(RedisConnectionError):
            redis_repo.get_json("k")

    def test_delete(self, redis_repo, redis_client):
        assert redis_repo.delete("k") is True

        redis_client.delete.return_value = 0
        assert redis_repo.delete("k") is False


class TestRedisPassphraseRepository:

    def test_save_sets_ttl_until_expiration(self, redis_repo, redis_client):
        repository = RedisPassphraseRepository(redis_repo)
        expires_at = datetime.now(timezone.utc) + timedelta(hours=2)

        assert repository.save("abc", "hash", expires_at) is True

        key, ttl, payload = redis_client.setex.call_args.args
        assert key == "fileshare:passphrase:abc"
        assert 7000 < ttl <= 7200
        assert json.loads(payload) == {"hash": "hash"}

    def test_save_past_expiration_uses_minimum_ttl(self, redis_repo, redis_client):
        repository = RedisPassphraseRepository(redis_repo)

        repository.save("abc", "hash", datetime(2000, 1, 1, tzinfo=timezone.utc))

        assert redis_client.setex.call_args.args[1] == 1

    def test_get(self, redis_repo, redis_client):
        redis_client.get.return_value = b'{"hash": "pbkdf2:sha256$..."}'

        assert RedisPassphraseRepository(redis_repo).get("abc") == "pbkdf2:sha256$..."
        redis_client.get.assert_called_once_with("fileshare:passphrase:abc")

    def test_get_missing(self, redis_repo):
        assert RedisPassphraseRepository(redis_repo).get("abc") is None

    def test_get_unreachable_fails_closed(self, redis_repo, redis_client):
        redis_client.get.side_effect = RedisConnectionError("down")

        with pytest.raises(PassphraseStoreError):
            RedisPassphraseRepository(redis_repo).get("abc")

    def test_delete(self, redis_repo, redis_client):
        assert RedisPassphraseRepository(redis_repo).delete("abc") is True
        redis_client.delete.assert_called_once_with("fileshare:passphrase:abc")


class TestInMemoryPassphraseRepository:

    def test_save_get_delete(self, clock, fixed_now):
        repository = InMemoryPassphraseRepository(clock=clock)

        repository.save("abc", "hash", fixed_now + timedelta(hours=1))

        assert repository.get("abc") == "hash"
        assert repository.delete("abc") is True
        assert repository.get("abc") is None
        assert repository.delete("abc") is False

    def test_entries_expire_with_their_object(self, clock, fixed_now):
        repository = InMemoryPassphraseRepository(clock=clock)
        repository.save("abc", "hash", fixed_now + timedelta(hours=1))

        clock.advance(hours=1)
        assert repository.get("abc") == "hash"

        clock.advance(seconds=1)
        assert repository.get("abc") is None

    def test_naive_expiration_is_utc(self, clock, fixed_now):
        repository = InMemoryPassphraseRepository(clock=clock)

        repository.save("abc", "hash", fixed_now.replace(tzinfo=None) + timedelta(minutes=5))

        assert repository.get("abc") == "hash"

    def test_save_evicts_expired_entries(self, clock, fixed_now):
        repository = InMemoryPassphraseRepository(clock=clock)
        repository.save("old", "hash", fixed_now + timedelta(hours=1))
        repository.save("kept", "hash", fixed_now + timedelta(hours=72))

        clock.advance(hours=2)
        repository.save("new", "hash", clock.now + timedelta(hours=1))

        assert len(repository) == 2
        assert repository.delete("old") is False
        assert repository.get("kept") == "hash"
