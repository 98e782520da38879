# authapi/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for account registration.

    :param email: User email.
    :type email: str
    :param password: Raw password (hashed by the service).
    :type password: str
    :param name: Optional display name.
    :type name: str | None
    """

    email: str
    password: str
    name: str | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email (normalized).
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class VerifyEmailIn:
    token: str


@dataclass(frozen=True, slots=True)
class ForgotPasswordIn:
    email: str


@dataclass(frozen=True, slots=True)
class ResetPasswordIn:
    token: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh, built from an already verified refresh token.

    :param user_id: Subject of the presented token.
    :type user_id: int
    :param refresh_token: Raw refresh token (compared against the stored hash).
    :type refresh_token: str
    :param jti: Token id of the presented token.
    :type jti: str
    """

    user_id: int
    refresh_token: str
    jti: str


@dataclass(frozen=True, slots=True)
class RevokeIn:
    """
    Input DTO for revoking one refresh session.

    :param user_id: Caller; must own the session.
    :type user_id: int
    :param jti: Refresh token id to revoke.
    :type jti: str
    """

    user_id: int
    jti: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param user_id: Authenticated caller.
    :type user_id: int
    :param access_jti: Jti of the access token used for the request.
    :type access_jti: str
    :param access_expires_at: Expiry of that access token.
    :type access_expires_at: datetime
    :param refresh_token: Optional refresh token whose session is closed too.
    :type refresh_token: str | None
    :param all_sessions: If True, revoke every refresh session of the user.
    :type all_sessions: bool
    """

    user_id: int
    access_jti: str
    access_expires_at: datetime
    refresh_token: str | None = None
    all_sessions: bool = False


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """Public projection of a user; never carries hashes or one-time tokens."""

    id: int
    email: str
    name: str | None
    email_verified: bool


@dataclass(frozen=True, slots=True)
class AuthResultOut:
    """
    Output DTO with a fresh token pair and the user it belongs to.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    :param user: Public user fields.
    :type user: UserPublicOut
    """

    access_token: str
    refresh_token: str
    user: UserPublicOut


@dataclass(frozen=True, slots=True)
class MessageOut:
    message: str


# ------------------------------ Settings ---------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthSettings:
    """
    Account-lifecycle configuration.

    :param email_verification_required: Reject logins of unverified accounts.
    :type email_verification_required: bool
    :param email_verification_ttl: Verification token lifetime string.
    :type email_verification_ttl: str
    :param password_reset_ttl: Reset token lifetime string.
    :type password_reset_ttl: str
    """

    email_verification_required: bool = True
    email_verification_ttl: str = "24h"
    password_reset_ttl: str = "1h"
