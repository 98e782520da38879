# authapi/services/tokens/dto.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class TokenPayload:
    """
    Verified (or merely decoded) token contents.

    :param subject: ``sub`` claim (stringified user id).
    :type subject: str
    :param jti: Unique token id.
    :type jti: str
    :param type: ``"access"`` or ``"refresh"``.
    :type type: str
    :param issued_at: ``iat`` as an aware UTC datetime.
    :type issued_at: datetime
    :param expires_at: ``exp`` as an aware UTC datetime.
    :type expires_at: datetime
    :param email: ``email`` claim when present.
    :type email: str | None
    :param extra: Any non-reserved claims.
    :type extra: dict[str, Any]
    """

    subject: str
    jti: str
    type: str
    issued_at: datetime
    expires_at: datetime
    email: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> TokenPayload:
        """Build a payload from decoded JWT claims (numeric ``iat``/``exp``)."""
        reserved = {"sub", "jti", "type", "iat", "exp", "email"}
        return cls(
            subject=str(claims.get("sub", "")),
            jti=str(claims.get("jti", "")),
            type=str(claims.get("type", "")),
            issued_at=_from_timestamp(claims.get("iat")),
            expires_at=_from_timestamp(claims.get("exp")),
            email=claims.get("email"),
            extra={k: v for k, v in claims.items() if k not in reserved},
        )

    @property
    def user_id(self) -> int:
        """``subject`` as an integer user id.

        :raises ValueError: If the subject is not numeric.
        """
        return int(self.subject)


@dataclass(frozen=True, slots=True)
class TokenPair:
    """
    Access + refresh tokens minted together.

    The jtis are drawn independently and are never equal.
    """

    access_token: str
    refresh_token: str
    access_token_jti: str
    refresh_token_jti: str
    access_token_expires_at: datetime
    refresh_token_expires_at: datetime


@dataclass(frozen=True, slots=True)
class TokenLifetimes:
    """
    Duration specs (``"15m"``, ``"7d"``) for both token types.

    :param access: Access token lifetime string.
    :type access: str
    :param refresh: Refresh token lifetime string.
    :type refresh: str
    """

    access: str = "15m"
    refresh: str = "7d"


def _from_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromtimestamp(float(value), UTC)
    except (TypeError, ValueError, OverflowError, OSError):
        return datetime.fromtimestamp(0, UTC)
