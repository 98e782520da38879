# authapi/services/tokens/service.py
from __future__ import annotations

import logging
import re
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

from authapi.services._shared.errors import InvalidOrExpiredTokenError
from authapi.services._shared.ports.token_codec import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    TokenCodec,
)
from authapi.services.tokens.dto import TokenLifetimes, TokenPair, TokenPayload

log = logging.getLogger(__name__)

DEFAULT_EXPIRATION_SECONDS = 900
RESERVED_CLAIMS = frozenset({"sub", "jti", "type", "iat", "exp"})

_DURATION = re.compile(r"(\d+)([smhd])")
_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value: str | None, default: int = DEFAULT_EXPIRATION_SECONDS) -> int:
    """
    Convert ``"<n><s|m|h|d>"`` into seconds.

    Anything else (empty, ``"15 m"``, ``"1w"``, ``"garbage"``) yields ``default``.

    :param value: Duration string.
    :type value: str | None
    :param default: Fallback in seconds.
    :type default: int
    :returns: Seconds.
    :rtype: int
    """
    match = _DURATION.fullmatch(value or "")
    if match is None:
        return default
    return int(match.group(1)) * _UNIT_SECONDS[match.group(2)]


class TokenService:
    """
    Issue and verify access/refresh token pairs.

    Both tokens of a pair share the subject but are signed with different
    secrets and carry an explicit ``type`` claim, so an access token can never
    pass as a refresh token (and vice versa) even when fed to the wrong
    verifier.
    """

    def __init__(self, *, codec: TokenCodec, lifetimes: TokenLifetimes | None = None) -> None:
        """
        :param codec: Signing adapter.
        :param lifetimes: Duration specs for both token types.
        """
        self.codec = codec
        self.lifetimes = lifetimes or TokenLifetimes()

    # ------------------------------------------------------------------ #
    # Issuing
    # ------------------------------------------------------------------ #

    def generate_token_pair(
        self,
        subject_id: int | str,
        extra_claims: dict[str, Any] | None = None,
    ) -> TokenPair:
        """
        Mint an access token and a refresh token for ``subject_id``.

        Extra claims are copied into both tokens; they can never replace
        ``sub``, ``jti``, ``type``, ``iat`` or ``exp``.

        :param subject_id: User id stored in ``sub``.
        :param extra_claims: Additional claims such as ``email``.
        :returns: Both tokens with their jtis and expiries.
        """
        now = datetime.now(UTC).replace(microsecond=0)
        extras = {k: v for k, v in (extra_claims or {}).items() if k not in RESERVED_CLAIMS}
        access_jti = str(uuid.uuid4())
        refresh_jti = str(uuid.uuid4())
        access_ttl = timedelta(seconds=self.get_token_expiration(self.lifetimes.access))
        refresh_ttl = timedelta(seconds=self.get_token_expiration(self.lifetimes.refresh))

        access = self.codec.encode(
            {**extras, "sub": str(subject_id), "jti": access_jti, "type": ACCESS_TOKEN_TYPE},
            token_type=ACCESS_TOKEN_TYPE,
            expires_in=access_ttl,
            issued_at=now,
        )
        refresh = self.codec.encode(
            {**extras, "sub": str(subject_id), "jti": refresh_jti, "type": REFRESH_TOKEN_TYPE},
            token_type=REFRESH_TOKEN_TYPE,
            expires_in=refresh_ttl,
            issued_at=now,
        )
        return TokenPair(
            access_token=access,
            refresh_token=refresh,
            access_token_jti=access_jti,
            refresh_token_jti=refresh_jti,
            access_token_expires_at=now + access_ttl,
            refresh_token_expires_at=now + refresh_ttl,
        )

    # ------------------------------------------------------------------ #
    # Verification
    # ------------------------------------------------------------------ #

    def verify_access_token(self, token: str) -> TokenPayload:
        """
        Verify with the access secret, check expiry and ``type == "access"``.

        :raises InvalidOrExpiredTokenError: On any failure.
        """
        return self._verify(token, ACCESS_TOKEN_TYPE)

    def verify_refresh_token(self, token: str) -> TokenPayload:
        """
        Verify with the refresh secret, check expiry and ``type == "refresh"``.

        :raises InvalidOrExpiredTokenError: On any failure.
        """
        return self._verify(token, REFRESH_TOKEN_TYPE)

    def decode_token(self, token: str) -> TokenPayload | None:
        """
        Parse claims **without** verifying signature or expiry.

        For diagnostics only; never use the result to authorize anything.
        """
        claims = self.codec.decode_unverified(token)
        if claims is None:
            return None
        return TokenPayload.from_claims(claims)

    @staticmethod
    def get_token_expiration(value: str | None) -> int:
        """Seconds for a ``"15m"``-style duration; 900 for anything unrecognised."""
        return parse_duration(value)

    def _verify(self, token: str, expected_type: str) -> TokenPayload:
        claims = self.codec.decode(token, token_type=expected_type)
        if claims.get("type") != expected_type:
            log.info("token.wrong_type expected=%s got=%s", expected_type, claims.get("type"))
            raise InvalidOrExpiredTokenError()
        return TokenPayload.from_claims(claims)
