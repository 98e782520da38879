# authapi/services/revocation/service.py
from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from authapi.models.base import as_utc
from authapi.services._shared.base import BaseService
from authapi.services._shared.errors import ConflictError, StorageError
from authapi.services._shared.ports.revocation_cache import (
    CacheUnavailableError,
    RevocationCache,
)
from authapi.services.tokens.service import TokenService

log = logging.getLogger(__name__)


class TokenRevocationService(BaseService):
    """
    Revoke token ids (jti) and answer "is this jti revoked?".

    Two stores are involved:

    * the ``revoked_tokens`` table, **authoritative**, written first and always;
    * the revocation cache, a TTL'd accelerator written second and only while
      the token still has lifetime left.

    A cache hit is trusted as-is. A cache miss means "unknown" and the durable
    table decides, so an evicted or never-written cache entry can never let a
    revoked token through.
    """

    def __init__(self, *, cache: RevocationCache, tokens: TokenService) -> None:
        """
        :param cache: Revocation cache adapter (Redis or in-memory).
        :param tokens: Used to verify raw tokens before revoking them.
        """
        super().__init__()
        self.cache = cache
        self.tokens = tokens

    # ------------------------------------------------------------------ #
    # Revoke
    # ------------------------------------------------------------------ #

    def revoke_token(
        self,
        jti: str,
        subject_id: int,
        expires_at: datetime,
        reason: str | None = None,
    ) -> None:
        """
        Tombstone ``jti`` durably, then mark it in the cache.

        Revoking an already-revoked jti is a no-op, not an error.

        :param jti: Token id to revoke.
        :param subject_id: Owner (informational).
        :param expires_at: Natural expiry of the token; drives the cache TTL.
        :param reason: Free-form label (``"logout"``, ``"refresh"`` ...).
        :raises StorageError: If the durable write fails.
        """
        expires_at = as_utc(expires_at)
        try:
            with self.rw_uow() as uow:
                uow.revoked_tokens.create(
                    user_id=subject_id, jti=jti, expires_at=expires_at, reason=reason
                )
        except ConflictError:
            log.info("revocation.already_revoked jti=%s", jti)
        except SQLAlchemyError as exc:
            log.error("revocation.durable_write_failed jti=%s", jti, exc_info=True)
            raise StorageError("revoke_token") from exc

        ttl = int((expires_at - self.now_utc()).total_seconds())
        if ttl <= 0:
            log.debug("revocation.cache_skipped jti=%s reason=expired", jti)
            return
        try:
            self.cache.mark_revoked(jti, ttl)
        except CacheUnavailableError as exc:
            log.warning("revocation.cache_write_failed jti=%s error=%s", jti, exc)

    def revoke_access_token(self, raw: str, subject_id: int, reason: str | None = None) -> None:
        """
        Verify ``raw`` as an access token and revoke its jti until its own expiry.

        :raises InvalidOrExpiredTokenError: If ``raw`` does not verify.
        """
        payload = self.tokens.verify_access_token(raw)
        self.revoke_token(payload.jti, subject_id, payload.expires_at, reason)

    def revoke_refresh_token(self, raw: str, subject_id: int, reason: str | None = None) -> None:
        """
        Verify ``raw`` as a refresh token and revoke its jti until its own expiry.

        :raises InvalidOrExpiredTokenError: If ``raw`` does not verify.
        """
        payload = self.tokens.verify_refresh_token(raw)
        self.revoke_token(payload.jti, subject_id, payload.expires_at, reason)

    # ------------------------------------------------------------------ #
    # Query
    # ------------------------------------------------------------------ #

    def is_revoked(self, jti: str) -> bool:
        """
        Return ``True`` if ``jti`` has been revoked.

        1. cache hit → ``True`` without touching the database;
        2. cache miss or cache failure → answer from ``revoked_tokens``.
        """
        try:
            if self.cache.is_revoked(jti):
                return True
        except CacheUnavailableError as exc:
            log.warning("revocation.cache_read_failed jti=%s error=%s", jti, exc)

        with self.ro_uow() as uow:
            return uow.revoked_tokens.is_revoked(jti)

    # ------------------------------------------------------------------ #
    # Maintenance
    # ------------------------------------------------------------------ #

    def purge_expired(self) -> dict[str, int]:
        """
        Delete tombstones and refresh sessions past their expiry.

        Expired tokens fail signature-time expiry checks anyway, so this is
        storage hygiene only.

        :returns: Deleted row counts per table.
        """
        now = self.now_utc()
        with self.rw_uow() as uow:
            revoked = uow.revoked_tokens.delete_expired(now)
            refresh = uow.refresh_tokens.delete_expired(now)
        log.info("revocation.purged revoked_tokens=%s refresh_tokens=%s", revoked, refresh)
        return {"revoked_tokens": revoked, "refresh_tokens": refresh}
