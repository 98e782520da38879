"""Repository package exposing persistence-layer access for all models."""

from __future__ import annotations

from authapi.repositories.base import BaseRepository
from authapi.repositories.refresh_token import RefreshTokenRepository
from authapi.repositories.revoked_token import RevokedTokenRepository
from authapi.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "RefreshTokenRepository",
    "RevokedTokenRepository",
    "UserRepository",
]
