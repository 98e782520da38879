from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Protocol


class CacheUnavailableError(Exception):
    """The revocation cache could not be reached or rejected the command."""


class RevocationCache(Protocol):
    """
    Fast, expiring lookup of revoked token ids (jti).

    An entry only ever *confirms* a revocation. A missing entry means "unknown"
    and callers must fall back to the durable tombstone table.

    Implementations raise :class:`CacheUnavailableError` on transport failures.
    """

    def mark_revoked(self, jti: str, ttl_seconds: int) -> None: ...
    def is_revoked(self, jti: str) -> bool: ...
    def ping(self) -> bool: ...


class InMemoryRevocationCache(RevocationCache):
    """Process-local cache for tests and Redis-less development."""

    def __init__(self) -> None:
        self._entries: dict[str, datetime] = {}

    def mark_revoked(self, jti: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            return
        self._entries[jti] = datetime.now(UTC) + timedelta(seconds=ttl_seconds)

    def is_revoked(self, jti: str) -> bool:
        expires_at = self._entries.get(jti)
        if expires_at is None:
            return False
        if expires_at <= datetime.now(UTC):
            del self._entries[jti]
            return False
        return True

    def ping(self) -> bool:
        return True
