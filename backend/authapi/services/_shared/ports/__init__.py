"""
authapi.services._shared.ports
==============================

Collection of *ports* (hexagonal interfaces) that define the contracts
for token signing, revocation caching, password hashing and email delivery.

These ports decouple the service layer from concrete implementations.

Modules
-------
- :mod:`token_codec`:
    Defines :class:`~.TokenCodec`: signing/verification with per-type secrets.

- :mod:`revocation_cache`:
    Defines :class:`~.RevocationCache`: expiring lookup of revoked jtis,
    plus an in-memory implementation.

- :mod:`password_hasher`:
    Defines :class:`~.PasswordHasher`.

- :mod:`email_sender`:
    Defines :class:`~.EmailSender` plus an outbox-collecting implementation.

Design Notes
------------
Concrete adapters (Redis, PyJWT, Werkzeug, SMTP) implement these interfaces
under ``authapi.infra``.
"""

from __future__ import annotations

from .email_sender import EmailSender, InMemoryEmailSender, SentEmail
from .password_hasher import PasswordHasher
from .revocation_cache import (
    CacheUnavailableError,
    InMemoryRevocationCache,
    RevocationCache,
)
from .token_codec import ACCESS_TOKEN_TYPE, REFRESH_TOKEN_TYPE, TokenCodec

__all__ = [
    "ACCESS_TOKEN_TYPE",
    "REFRESH_TOKEN_TYPE",
    "CacheUnavailableError",
    "EmailSender",
    "InMemoryEmailSender",
    "InMemoryRevocationCache",
    "PasswordHasher",
    "RevocationCache",
    "SentEmail",
    "TokenCodec",
]
