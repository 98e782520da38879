"""Unit tests for RedisRevocationCache against fakeredis."""

from __future__ import annotations

import pytest
from authapi.infra.redis.redis_revocation_cache import RedisRevocationCache
from authapi.services._shared.ports import CacheUnavailableError
from redis.exceptions import ConnectionError as RedisConnectionError


class DownRedis:
    """Client double raising like a Redis that cannot be reached."""

    def set(self, *args, **kwargs):
        raise RedisConnectionError("connection refused")

    def exists(self, *args):
        raise RedisConnectionError("connection refused")

    def ping(self):
        raise RedisConnectionError("connection refused")


def test_mark_sets_key_with_ttl(revocation_cache, redis_client):
    revocation_cache.mark_revoked("abc", 120)

    assert redis_client.get("revoked:abc") == "1"
    assert 0 < redis_client.ttl("revoked:abc") <= 120
    assert revocation_cache.is_revoked("abc")
    assert not revocation_cache.is_revoked("other")


@pytest.mark.parametrize("ttl", [0, -30])
def test_non_positive_ttl_writes_nothing(revocation_cache, redis_client, ttl):
    revocation_cache.mark_revoked("abc", ttl)

    assert redis_client.exists("revoked:abc") == 0


def test_ping(revocation_cache):
    assert revocation_cache.ping() is True


def test_transport_errors_become_cache_unavailable():
    cache = RedisRevocationCache(DownRedis())

    with pytest.raises(CacheUnavailableError):
        cache.mark_revoked("abc", 60)
    with pytest.raises(CacheUnavailableError):
        cache.is_revoked("abc")
    assert cache.ping() is False
