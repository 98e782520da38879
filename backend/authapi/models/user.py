"""User account model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String, UniqueConstraint, false
from sqlalchemy.orm import Mapped, mapped_column, validates

from authapi.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin, as_utc


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Authentication identity.

    Fields
    ------
    email : str
        Login email. Stored normalized (lowercase, trimmed).
    password_hash : str
        Opaque digest produced by the password hasher.
    name : str | None
        Optional display name.
    email_verified : bool
        Whether the owner proved control of ``email``.
    email_verified_at : datetime | None
        When the verification happened.
    email_verification_token / email_verification_expires
        SHA-256 digest of the pending verification token and its expiry.
    password_reset_token / password_reset_expires
        SHA-256 digest of the pending reset token and its expiry.

    One-time tokens are stored as digests only; the raw value exists solely in
    the email sent to the user.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    email_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    email_verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    email_verification_token: Mapped[str | None] = mapped_column(String(64), nullable=True)
    email_verification_expires: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    password_reset_token: Mapped[str | None] = mapped_column(String(64), nullable=True)
    password_reset_expires: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        Index("ix_users_email_verification_token", "email_verification_token"),
        Index("ix_users_password_reset_token", "password_reset_token"),
    )

    # -------------------- One-time tokens --------------------
    def is_email_verification_valid(self, now: datetime) -> bool:
        """
        Return ``True`` while a verification token is pending and unexpired.

        :param now: Current instant (aware).
        :type now: datetime
        :rtype: bool
        """
        if not self.email_verification_token or self.email_verification_expires is None:
            return False
        return as_utc(self.email_verification_expires) > now

    def is_password_reset_valid(self, now: datetime) -> bool:
        """Return ``True`` while a reset token is pending and unexpired."""
        if not self.password_reset_token or self.password_reset_expires is None:
            return False
        return as_utc(self.password_reset_expires) > now

    def mark_email_verified(self, now: datetime) -> None:
        self.email_verified = True
        self.email_verified_at = now
        self.email_verification_token = None
        self.email_verification_expires = None

    def clear_password_reset(self) -> None:
        self.password_reset_token = None
        self.password_reset_expires = None

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :param key: Field name (``email``).
        :type key: str
        :param value: Email to normalize.
        :type value: str
        :returns: Normalized email (lowercased/trimmed).
        :rtype: str
        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v
