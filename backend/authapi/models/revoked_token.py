"""Durable revocation tombstones."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from authapi.core.extensions import db

from .base import CreatedAtMixin, PKMixin, ReprMixin


class RevokedToken(PKMixin, ReprMixin, CreatedAtMixin, db.Model):
    """
    A token id that must be rejected until ``expires_at``.

    This table is the source of truth for revocation; the Redis markers are a
    lookup accelerator only. ``user_id`` is informational and carries no
    foreign key so tombstones outlive account deletion.
    """

    __tablename__ = "revoked_tokens"

    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    jti: Mapped[str] = mapped_column(String(64), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    reason: Mapped[str | None] = mapped_column(String(50), nullable=True)

    __table_args__ = (
        UniqueConstraint("jti", name="uq_revoked_tokens_jti"),
        Index("ix_revoked_tokens_expires_at", "expires_at"),
    )
