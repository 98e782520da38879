"""Revocation tombstone repository."""

from __future__ import annotations

from datetime import datetime

from authapi.models.base import as_utc
from authapi.models.revoked_token import RevokedToken
from authapi.repositories.base import BaseRepository


class RevokedTokenRepository(BaseRepository[RevokedToken]):
    """Persistence for :class:`RevokedToken` tombstones, keyed by ``jti``."""

    model = RevokedToken

    def _filterable_fields(self):
        return {"jti": RevokedToken.jti, "user_id": RevokedToken.user_id}

    def create(
        self,
        *,
        user_id: int,
        jti: str,
        expires_at: datetime,
        reason: str | None = None,
    ) -> RevokedToken:
        """Persist a tombstone.

        :raises ConflictError: If ``jti`` is already tombstoned.
        """
        row = RevokedToken(
            user_id=user_id,
            jti=jti,
            expires_at=as_utc(expires_at),
            reason=reason,
        )
        return self.add_unique(
            row,
            constraint=("uq_revoked_tokens_jti", "revoked_tokens.jti"),
            entity="RevokedToken",
            detail=f"jti {jti} already revoked",
        )

    def find_by_jti(self, jti: str) -> RevokedToken | None:
        return self.find_one(jti=jti)

    def is_revoked(self, jti: str) -> bool:
        return self.exists(jti=jti)

    def delete_expired(self, now: datetime) -> int:
        return self.delete_where(RevokedToken.expires_at < as_utc(now))
