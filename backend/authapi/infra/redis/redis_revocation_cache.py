from typing import cast

import redis  # type: ignore[import-untyped]
from redis.exceptions import RedisError  # type: ignore[import-untyped]

from authapi.services._shared.ports.revocation_cache import CacheUnavailableError


class RedisRevocationCache:
    """
    Revoked-jti markers stored as ``revoked:<jti>`` with a TTL.

    Keys expire together with the token they describe, so the cache never
    needs a sweep.
    """

    def __init__(self, r: redis.Redis):
        self.r = r

    @staticmethod
    def _k(jti: str) -> str:
        return f"revoked:{jti}"

    def mark_revoked(self, jti: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            return
        try:
            self.r.set(self._k(jti), "1", ex=int(ttl_seconds))
        except RedisError as exc:
            raise CacheUnavailableError(str(exc)) from exc

    def is_revoked(self, jti: str) -> bool:
        try:
            return cast(int, self.r.exists(self._k(jti))) == 1
        except RedisError as exc:
            raise CacheUnavailableError(str(exc)) from exc

    def ping(self) -> bool:
        try:
            return bool(self.r.ping())
        except RedisError:
            return False
