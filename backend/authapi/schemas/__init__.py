"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    AuthResultSchema,
    ForgotPasswordSchema,
    LoginSchema,
    MessageSchema,
    RegisterSchema,
    ResetPasswordSchema,
    RevokeSchema,
    UserPublicSchema,
    VerifyEmailSchema,
)

__all__ = [
    "AuthResultSchema",
    "ForgotPasswordSchema",
    "LoginSchema",
    "MessageSchema",
    "RegisterSchema",
    "ResetPasswordSchema",
    "RevokeSchema",
    "UserPublicSchema",
    "VerifyEmailSchema",
]
