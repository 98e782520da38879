"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP directly. They serve as stable contracts between
repositories, adapters, and application services.

Every error is a small value built at the point of failure; nothing in
the service layer keeps a shared instance around to re-raise.

The translation to HTTP responses (RFC 7807) is handled by
``authapi/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL reports the constraint name; SQLite reports the offending
    ``table.column`` instead, so callers may pass either.

    :param exc: The exception raised by SQLAlchemy during flush/commit.
    :type exc: IntegrityError
    :param constraint_name: Constraint name (``uq_users_email``) or column
        reference (``users.email``).
    :type constraint_name: str
    :returns: ``True`` if the IntegrityError matches.
    :rtype: bool
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories, adapters or services.
    - The API layer translates them to ``APIError`` through ``BaseService``.
    """

    pass


# --------------------------------------------------------------------------- #
# Lookup / uniqueness
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


@dataclass(slots=True)
class TokenNotFoundError(NotFoundError):
    """Raised when a refresh session cannot be found for the caller."""

    entity: str = "Refresh token"
    key: str | int = ""

    def __str__(self) -> str:
        return "Refresh token not found"


# --------------------------------------------------------------------------- #
# Authentication
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class UnauthorizedError(ServiceError):
    """
    Raised when the caller cannot be authenticated.

    :param reason: Client-safe message.
    :type reason: str
    """

    reason: str = "Unauthorized"

    def __str__(self) -> str:
        return self.reason


@dataclass(slots=True)
class InvalidCredentialsError(UnauthorizedError):
    """Unknown email or wrong password. Clients never learn which."""

    reason: str = "Invalid credentials"


@dataclass(slots=True)
class UnverifiedEmailError(InvalidCredentialsError):
    """
    Correct credentials for an account whose email is not verified.

    Renders exactly like :class:`InvalidCredentialsError`; only logs tell the
    two apart.
    """


@dataclass(slots=True)
class InvalidOrExpiredTokenError(UnauthorizedError):
    """Bad signature, expired, malformed, or wrong token type."""

    reason: str = "Invalid or expired token"


@dataclass(slots=True)
class InvalidOneTimeTokenError(ServiceError):
    """
    Email-verification or password-reset token unknown or past its expiry.

    :param purpose: ``"verification"`` or ``"reset"``.
    :type purpose: str
    """

    purpose: str

    def __str__(self) -> str:
        return f"Invalid or expired {self.purpose} token"


# --------------------------------------------------------------------------- #
# Infrastructure
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class StorageError(ServiceError):
    """
    Raised when the durable store rejects or cannot complete a write.

    :param operation: Short operation label for logs (e.g. ``"revoke_token"``).
    :type operation: str
    """

    operation: str

    def __str__(self) -> str:
        return f"Storage failure during {self.operation}"
