"""Per-application adapters and service builders.

Adapters are created once per app in :func:`init_app` and stored in
``app.extensions``; services are cheap and built per call from them.
"""

from __future__ import annotations

from typing import cast

from flask import Flask, current_app

from authapi.infra.email.smtp_email_sender import SMTPEmailSender
from authapi.infra.jwt.pyjwt_token_codec import JWTTokenCodec
from authapi.infra.redis.redis_revocation_cache import RedisRevocationCache
from authapi.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher
from authapi.services._shared.ports import (
    EmailSender,
    InMemoryRevocationCache,
    PasswordHasher,
    RevocationCache,
    TokenCodec,
)
from authapi.services.auth.dto import AuthSettings
from authapi.services.auth.service import AuthService
from authapi.services.revocation.service import TokenRevocationService
from authapi.services.tokens.dto import TokenLifetimes
from authapi.services.tokens.service import TokenService

TOKEN_CODEC = "token_codec"
REVOCATION_CACHE = "revocation_cache"
PASSWORD_HASHER = "password_hasher"
EMAIL_SENDER = "email_sender"


def init_app(app: Flask) -> None:
    """Create the adapters for ``app``.

    Must run after :func:`authapi.core.extensions.init_app` so the Redis client
    (if any) is available.
    """
    cfg = app.config
    app.extensions[TOKEN_CODEC] = JWTTokenCodec(
        access_secret=cfg["JWT_ACCESS_SECRET"],
        refresh_secret=cfg["JWT_REFRESH_SECRET"],
        algorithm=cfg.get("JWT_ALGORITHM", "HS256"),
    )
    client = app.extensions.get("redis_client")
    app.extensions[REVOCATION_CACHE] = (
        RedisRevocationCache(client) if client is not None else InMemoryRevocationCache()
    )
    app.extensions[PASSWORD_HASHER] = WerkzeugPasswordHasher(
        method=cfg.get("PASSWORD_HASH_METHOD", "scrypt")
    )
    app.extensions[EMAIL_SENDER] = SMTPEmailSender(
        smtp_host=cfg.get("SMTP_HOST"),
        smtp_port=int(cfg.get("SMTP_PORT", 587)),
        smtp_user=cfg.get("SMTP_USER"),
        smtp_password=cfg.get("SMTP_PASSWORD"),
        use_tls=bool(cfg.get("SMTP_USE_TLS", True)),
        from_email=cfg.get("MAIL_FROM"),
        app_url=cfg.get("APP_URL", "http://localhost:3000"),
    )


# ---------------------------------------------------------------------------
# Accessors (current app)
# ---------------------------------------------------------------------------


def token_codec() -> TokenCodec:
    return cast(TokenCodec, current_app.extensions[TOKEN_CODEC])


def revocation_cache() -> RevocationCache:
    return cast(RevocationCache, current_app.extensions[REVOCATION_CACHE])


def password_hasher() -> PasswordHasher:
    return cast(PasswordHasher, current_app.extensions[PASSWORD_HASHER])


def email_sender() -> EmailSender:
    return cast(EmailSender, current_app.extensions[EMAIL_SENDER])


# ---------------------------------------------------------------------------
# Service builders
# ---------------------------------------------------------------------------


def token_service() -> TokenService:
    cfg = current_app.config
    return TokenService(
        codec=token_codec(),
        lifetimes=TokenLifetimes(
            access=cfg.get("JWT_ACCESS_TOKEN_EXPIRATION", "15m"),
            refresh=cfg.get("JWT_REFRESH_TOKEN_EXPIRATION", "7d"),
        ),
    )


def revocation_service() -> TokenRevocationService:
    return TokenRevocationService(cache=revocation_cache(), tokens=token_service())


def auth_service() -> AuthService:
    cfg = current_app.config
    tokens = token_service()
    return AuthService(
        tokens=tokens,
        revocation=TokenRevocationService(cache=revocation_cache(), tokens=tokens),
        hasher=password_hasher(),
        email_sender=email_sender(),
        settings=AuthSettings(
            email_verification_required=bool(cfg.get("EMAIL_VERIFICATION_REQUIRED", True)),
            email_verification_ttl=cfg.get("EMAIL_VERIFICATION_TOKEN_EXPIRATION", "24h"),
            password_reset_ttl=cfg.get("PASSWORD_RESET_TOKEN_EXPIRATION", "1h"),
        ),
    )
