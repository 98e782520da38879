"""User repository for persistence and lookup utilities."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from authapi.models.user import User
from authapi.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Lookups by email and by one-time token digest.
    It NEVER handles tokens or password hashing, only DB-level user management.
    """

    model = User

    # ---------------------------- Whitelists ----------------------------

    def _filterable_fields(self):
        """Whitelist fields safe for equality filters."""
        return {
            "email": User.email,
            "email_verified": User.email_verified,
        }

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == email.lower().strip())
        result = self.session.execute(stmt).scalars().first()
        return cast(User | None, result)

    def exists_by_email(self, email: str) -> bool:
        """Return ``True`` when a user with the provided email exists.

        :param email: Email address to normalise and search.
        :type email: str
        :returns: ``True`` if a row is found; otherwise ``False``.
        :rtype: bool
        """
        stmt = select(User.id).where(User.email == email.lower().strip())
        return bool(self.session.execute(stmt).first())

    def get_by_verification_token(self, token_digest: str) -> User | None:
        """Fetch the user holding a pending email-verification token digest."""
        stmt = select(User).where(User.email_verification_token == token_digest)
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def get_by_reset_token(self, token_digest: str) -> User | None:
        """Fetch the user holding a pending password-reset token digest."""
        stmt = select(User).where(User.password_reset_token == token_digest)
        return cast(User | None, self.session.execute(stmt).scalars().first())
