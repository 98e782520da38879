from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Protocol

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class TokenCodec(Protocol):
    """
    Abstraction for signing and verifying compact signed tokens.

    Access and refresh tokens are signed with **different** secrets, selected
    by ``token_type``. A token signed for one type never verifies as the other.
    """

    def encode(
        self,
        claims: dict[str, Any],
        *,
        token_type: str,
        expires_in: timedelta,
        issued_at: datetime | None = None,
    ) -> str:
        """
        Sign ``claims`` adding ``iat`` and ``exp``.

        :param claims: Payload claims (``sub``, ``jti``, ``type`` ...).
        :param token_type: ``"access"`` or ``"refresh"``; selects the secret.
        :param expires_in: Lifetime added to the issue instant.
        :param issued_at: Issue instant; defaults to now.
        :returns: Encoded token.
        """
        ...

    def decode(self, token: str, *, token_type: str) -> dict[str, Any]:
        """
        Verify signature (with the ``token_type`` secret) and expiry.

        :raises InvalidOrExpiredTokenError: On any verification failure.
        """
        ...

    def decode_unverified(self, token: str) -> dict[str, Any] | None:
        """Return the claims without verification, or ``None`` if unparseable."""
        ...
