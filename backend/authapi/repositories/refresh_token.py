"""Refresh-session repository."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select

from authapi.models.base import as_utc
from authapi.models.refresh_token import RefreshToken
from authapi.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence for :class:`RefreshToken` rows, keyed by ``jti``."""

    model = RefreshToken

    def _filterable_fields(self):
        return {"jti": RefreshToken.jti, "user_id": RefreshToken.user_id}

    def create(
        self,
        *,
        user_id: int,
        hashed_token: str,
        jti: str,
        expires_at: datetime,
    ) -> RefreshToken:
        """Persist a new refresh session.

        :param user_id: Owner of the session.
        :type user_id: int
        :param hashed_token: Hasher digest of the raw refresh token.
        :type hashed_token: str
        :param jti: Token id embedded in the refresh token.
        :type jti: str
        :param expires_at: Expiry embedded in the refresh token.
        :type expires_at: datetime
        :returns: The flushed row.
        :rtype: RefreshToken
        :raises ConflictError: If a row with ``jti`` already exists.
        """
        row = RefreshToken(
            user_id=user_id,
            token_hash=hashed_token,
            jti=jti,
            expires_at=as_utc(expires_at),
        )
        return self.add_unique(
            row,
            constraint=("uq_refresh_tokens_jti", "refresh_tokens.jti"),
            entity="RefreshToken",
            detail=f"jti {jti} already stored",
        )

    def find_by_jti(self, jti: str) -> RefreshToken | None:
        return self.find_one(jti=jti)

    def list_by_user_id(self, user_id: int) -> list[RefreshToken]:
        stmt = select(RefreshToken).where(RefreshToken.user_id == user_id)
        return list(self.session.execute(stmt).scalars().all())

    def delete_by_jti(self, jti: str) -> int:
        """Delete the session with ``jti``; returns ``1`` only for the caller that removed it."""
        return self.delete_where(RefreshToken.jti == jti)

    def delete_by_user_id(self, user_id: int) -> int:
        return self.delete_where(RefreshToken.user_id == user_id)

    def delete_expired(self, now: datetime) -> int:
        return self.delete_where(RefreshToken.expires_at < as_utc(now))
