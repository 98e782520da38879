"""Unit tests for TokenService and duration parsing."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from authapi.infra.jwt.pyjwt_token_codec import JWTTokenCodec
from authapi.services._shared.errors import InvalidOrExpiredTokenError, UnauthorizedError
from authapi.services.tokens.dto import TokenLifetimes
from authapi.services.tokens.service import TokenService, parse_duration
from freezegun import freeze_time

ACCESS_SECRET = "unit-access-secret-0123456789abcdef"
REFRESH_SECRET = "unit-refresh-secret-0123456789abcdef"


@pytest.fixture()
def codec() -> JWTTokenCodec:
    return JWTTokenCodec(access_secret=ACCESS_SECRET, refresh_secret=REFRESH_SECRET)


@pytest.fixture()
def tokens(codec) -> TokenService:
    return TokenService(codec=codec, lifetimes=TokenLifetimes(access="15m", refresh="7d"))


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("15m", 900),
        ("7d", 604800),
        ("30s", 30),
        ("2h", 7200),
        ("garbage", 900),
        ("", 900),
        (None, 900),
        ("15 m", 900),
        ("1w", 900),
        ("-5m", 900),
    ],
)
def test_get_token_expiration(value, expected):
    assert TokenService.get_token_expiration(value) == expected


def test_parse_duration_custom_default():
    assert parse_duration("soon", default=86400) == 86400


def test_generate_pair_has_distinct_jtis_and_types(tokens):
    pair = tokens.generate_token_pair(42, {"email": "bob@example.com"})

    assert pair.access_token_jti != pair.refresh_token_jti
    access = tokens.verify_access_token(pair.access_token)
    refresh = tokens.verify_refresh_token(pair.refresh_token)
    assert access.type == "access" and refresh.type == "refresh"
    assert access.subject == refresh.subject == "42"
    assert access.user_id == 42
    assert access.email == "bob@example.com"
    assert access.jti == pair.access_token_jti
    assert refresh.jti == pair.refresh_token_jti


def test_pair_expiries_follow_lifetimes(tokens):
    with freeze_time("2024-01-01 12:00:00"):
        pair = tokens.generate_token_pair(1)
        now = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
        assert pair.access_token_expires_at == now + timedelta(minutes=15)
        assert pair.refresh_token_expires_at == now + timedelta(days=7)
        assert tokens.verify_access_token(pair.access_token).expires_at == (
            pair.access_token_expires_at
        )


def test_reserved_claims_cannot_be_overridden(tokens):
    pair = tokens.generate_token_pair(7, {"sub": "999", "type": "refresh", "jti": "x", "role": "a"})

    payload = tokens.verify_access_token(pair.access_token)
    assert payload.subject == "7"
    assert payload.type == "access"
    assert payload.jti == pair.access_token_jti
    assert payload.extra == {"role": "a"}


def test_access_token_rejected_by_refresh_verifier(tokens):
    pair = tokens.generate_token_pair(1)

    with pytest.raises(InvalidOrExpiredTokenError):
        tokens.verify_refresh_token(pair.access_token)
    with pytest.raises(InvalidOrExpiredTokenError):
        tokens.verify_access_token(pair.refresh_token)


def test_type_claim_checked_even_with_right_secret(codec, tokens):
    # Signed with the refresh secret but labelled as access.
    forged = codec.encode(
        {"sub": "1", "jti": "j", "type": "access"},
        token_type="refresh",
        expires_in=timedelta(minutes=5),
    )
    with pytest.raises(InvalidOrExpiredTokenError):
        tokens.verify_refresh_token(forged)


def test_expired_token_rejected(tokens):
    with freeze_time("2024-01-01 00:00:00"):
        pair = tokens.generate_token_pair(1)
    with freeze_time("2024-01-01 00:15:01"):
        with pytest.raises(InvalidOrExpiredTokenError):
            tokens.verify_access_token(pair.access_token)
        # The refresh token is still fine.
        assert tokens.verify_refresh_token(pair.refresh_token).subject == "1"


def test_tampered_token_rejected(tokens):
    pair = tokens.generate_token_pair(1)
    head, body, sig = pair.access_token.split(".")
    tampered = ".".join([head, body, sig[::-1]])

    with pytest.raises(InvalidOrExpiredTokenError) as excinfo:
        tokens.verify_access_token(tampered)
    assert isinstance(excinfo.value, UnauthorizedError)
    assert str(excinfo.value) == "Invalid or expired token"


def test_decode_token_without_verification(tokens):
    with freeze_time("2024-01-01"):
        pair = tokens.generate_token_pair(5)
    # Expired, but still decodable for diagnostics.
    payload = tokens.decode_token(pair.refresh_token)
    assert payload is not None
    assert payload.type == "refresh"
    assert payload.subject == "5"
    assert tokens.decode_token("not-a-jwt") is None
