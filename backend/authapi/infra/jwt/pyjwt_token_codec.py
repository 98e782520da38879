"""PyJWT adapter for :class:`~authapi.services._shared.ports.TokenCodec`."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from authapi.services._shared.errors import InvalidOrExpiredTokenError
from authapi.services._shared.ports.token_codec import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
)

REQUIRED_CLAIMS = ["exp", "iat", "jti", "sub", "type"]


class JWTTokenCodec:
    """
    HMAC-signed JWTs with one secret per token type.

    :param access_secret: Secret used for ``"access"`` tokens.
    :param refresh_secret: Secret used for ``"refresh"`` tokens.
    :param algorithm: JWS algorithm; both types share it.
    """

    def __init__(
        self,
        *,
        access_secret: str,
        refresh_secret: str,
        algorithm: str = "HS256",
    ) -> None:
        if not access_secret or not refresh_secret:
            raise ValueError("Both access and refresh secrets are required.")
        self._secrets = {
            ACCESS_TOKEN_TYPE: access_secret,
            REFRESH_TOKEN_TYPE: refresh_secret,
        }
        self.algorithm = algorithm

    def secret_for(self, token_type: str) -> str:
        """Return the signing secret of ``token_type``."""
        try:
            return self._secrets[token_type]
        except KeyError:
            raise ValueError(f"Unknown token type: {token_type!r}") from None

    def encode(
        self,
        claims: dict[str, Any],
        *,
        token_type: str,
        expires_in: timedelta,
        issued_at: datetime | None = None,
    ) -> str:
        now = issued_at or datetime.now(UTC)
        payload = {**claims, "iat": now, "exp": now + expires_in}
        return jwt.encode(payload, self.secret_for(token_type), algorithm=self.algorithm)

    def decode(self, token: str, *, token_type: str) -> dict[str, Any]:
        try:
            return jwt.decode(
                token,
                self.secret_for(token_type),
                algorithms=[self.algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.PyJWTError as exc:
            raise InvalidOrExpiredTokenError() from exc

    def decode_unverified(self, token: str) -> dict[str, Any] | None:
        try:
            return jwt.decode(
                token,
                options={"verify_signature": False, "verify_exp": False},
                algorithms=[self.algorithm],
            )
        except jwt.PyJWTError:
            return None
