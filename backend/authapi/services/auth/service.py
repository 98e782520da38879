# authapi/services/auth/service.py
from __future__ import annotations

import hashlib
import logging
import secrets
from collections.abc import Callable
from datetime import timedelta

from authapi.models.base import as_utc
from authapi.models.user import User
from authapi.services._shared.base import BaseService
from authapi.services._shared.errors import (
    ConflictError,
    InvalidCredentialsError,
    InvalidOneTimeTokenError,
    TokenNotFoundError,
    UnauthorizedError,
    UnverifiedEmailError,
)
from authapi.services._shared.ports.email_sender import EmailSender
from authapi.services._shared.ports.password_hasher import PasswordHasher
from authapi.services.auth.dto import (
    AuthResultOut,
    AuthSettings,
    ForgotPasswordIn,
    LoginIn,
    LogoutIn,
    MessageOut,
    RefreshIn,
    RegisterIn,
    ResetPasswordIn,
    RevokeIn,
    UserPublicOut,
    VerifyEmailIn,
)
from authapi.services.revocation.service import TokenRevocationService
from authapi.services.tokens.service import TokenService, parse_duration

log = logging.getLogger(__name__)

FORGOT_PASSWORD_MESSAGE = "If the email exists, a reset link has been sent"
INVALID_REFRESH_TOKEN = "Invalid refresh token"


def _digest(raw: str) -> str:
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def _new_one_time_token() -> tuple[str, str]:
    """Return ``(raw, sha256 digest)`` for an emailed one-time token."""
    raw = secrets.token_urlsafe(32)
    return raw, _digest(raw)


class AuthService(BaseService):
    """
    Account lifecycle and session service.

    Covers registration, email verification, password reset, login, refresh
    with single-use rotation, per-session revocation and logout. Tokens are
    minted by :class:`TokenService`; every revocation goes through
    :class:`TokenRevocationService` so the durable tombstone is always written.
    """

    def __init__(
        self,
        *,
        tokens: TokenService,
        revocation: TokenRevocationService,
        hasher: PasswordHasher,
        email_sender: EmailSender,
        settings: AuthSettings | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param tokens: Token issuing/verification.
        :param revocation: Dual-store revocation.
        :param hasher: Password (and refresh-token) hasher.
        :param email_sender: Outbound email; failures are logged, never raised.
        :param settings: Verification gate and one-time token lifetimes.
        """
        super().__init__()
        self.tokens = tokens
        self.revocation = revocation
        self.hasher = hasher
        self.email = email_sender
        self.settings = settings or AuthSettings()

    # ------------------------------------------------------------------ #
    # Registration & verification
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> MessageOut:
        """
        Create an unverified account and email a verification link.

        :raises ConflictError: If the email is already registered.
        """
        raw_token, token_digest = _new_one_time_token()
        expires = self.now_utc() + timedelta(
            seconds=parse_duration(self.settings.email_verification_ttl, default=86400)
        )
        with self.rw_uow() as uow:
            if uow.users.exists_by_email(dto.email):
                raise ConflictError("User", "Email already registered")
            user = User(
                email=dto.email,
                password_hash=self.hasher.hash(dto.password),
                name=dto.name,
                email_verified=False,
                email_verification_token=token_digest,
                email_verification_expires=expires,
            )
            uow.users.add_unique(
                user,
                constraint=("uq_users_email", "users.email"),
                entity="User",
                detail="Email already registered",
            )
            email, user_id = user.email, user.id

        log.info("auth.registered user_id=%s", user_id)
        self._send_best_effort(self.email.send_verification_email, email, raw_token)
        return MessageOut(
            "Registration successful. Please check your email to verify your account."
        )

    def verify_email(self, dto: VerifyEmailIn) -> MessageOut:
        """
        Consume a verification token.

        :raises InvalidOneTimeTokenError: If unknown or expired.
        """
        now = self.now_utc()
        with self.rw_uow() as uow:
            user = uow.users.get_by_verification_token(_digest(dto.token))
            if user is None or not user.is_email_verification_valid(now):
                raise InvalidOneTimeTokenError("verification")
            user.mark_email_verified(now)
        return MessageOut("Email verified successfully")

    # ------------------------------------------------------------------ #
    # Password reset
    # ------------------------------------------------------------------ #

    def forgot_password(self, dto: ForgotPasswordIn) -> MessageOut:
        """
        Email a reset link if the account exists.

        The response is identical whether or not the email is registered.
        """
        raw_token, token_digest = _new_one_time_token()
        expires = self.now_utc() + timedelta(
            seconds=parse_duration(self.settings.password_reset_ttl, default=3600)
        )
        recipient: str | None = None
        with self.rw_uow() as uow:
            user = uow.users.get_by_email(dto.email)
            if user is not None:
                user.password_reset_token = token_digest
                user.password_reset_expires = expires
                recipient = user.email

        if recipient is None:
            log.info("auth.forgot_password_unknown_email")
        else:
            self._send_best_effort(self.email.send_password_reset_email, recipient, raw_token)
        return MessageOut(FORGOT_PASSWORD_MESSAGE)

    def reset_password(self, dto: ResetPasswordIn) -> MessageOut:
        """
        Set a new password and end every refresh session of the account.

        :raises InvalidOneTimeTokenError: If unknown or expired.
        """
        now = self.now_utc()
        with self.rw_uow() as uow:
            user = uow.users.get_by_reset_token(_digest(dto.token))
            if user is None or not user.is_password_reset_valid(now):
                raise InvalidOneTimeTokenError("reset")
            user.password_hash = self.hasher.hash(dto.password)
            user.clear_password_reset()
            removed = uow.refresh_tokens.delete_by_user_id(user.id)
            user_id = user.id
        log.info("auth.password_reset user_id=%s sessions_removed=%s", user_id, removed)
        return MessageOut("Password reset successfully")

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> AuthResultOut:
        """
        Authenticate credentials and issue a fresh token pair.

        Unknown email, wrong password and (when required) unverified email all
        raise an :class:`InvalidCredentialsError` with the same message.

        :param dto: Login input.
        :returns: Tokens plus public user fields.
        :raises InvalidCredentialsError: If authentication fails.
        """
        with self.ro_uow() as uow:
            user = uow.users.get_by_email(dto.email)
            if user is None:
                log.info("auth.login_failed reason=unknown_email")
                raise InvalidCredentialsError()
            if not self.hasher.verify(dto.password, user.password_hash):
                log.info("auth.login_failed reason=bad_password user_id=%s", user.id)
                raise InvalidCredentialsError()
            if self.settings.email_verification_required and not user.email_verified:
                log.info("auth.login_failed reason=unverified_email user_id=%s", user.id)
                raise UnverifiedEmailError()
            profile = self._public(user)

        result = self._issue_session(profile)
        log.info("auth.login user_id=%s", profile.id)
        return result

    # ------------------------------------------------------------------ #
    # Refresh with single-use rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> AuthResultOut:
        """
        Exchange a refresh token for a new pair, consuming the old one.

        The presented token must match a stored session (by jti and hash).
        The old jti is tombstoned, its row deleted, and a new session stored.
        When two requests race on the same token, only the one whose
        ``DELETE`` removes the row succeeds.

        :raises UnauthorizedError: Unknown user, unknown/consumed jti, or hash mismatch.
        """
        with self.ro_uow() as uow:
            user = uow.users.get(dto.user_id)
            if user is None:
                log.info("auth.refresh_failed reason=unknown_user user_id=%s", dto.user_id)
                raise UnauthorizedError(INVALID_REFRESH_TOKEN)
            stored = uow.refresh_tokens.find_by_jti(dto.jti)
            if stored is None or stored.user_id != user.id:
                log.info("auth.refresh_failed reason=unknown_session jti=%s", dto.jti)
                raise UnauthorizedError(INVALID_REFRESH_TOKEN)
            if not self.hasher.verify(dto.refresh_token, stored.token_hash):
                log.warning("auth.refresh_failed reason=hash_mismatch jti=%s", dto.jti)
                raise UnauthorizedError(INVALID_REFRESH_TOKEN)
            profile = self._public(user)
            old_expires_at = as_utc(stored.expires_at)

        self.revocation.revoke_token(dto.jti, profile.id, old_expires_at, reason="refresh")

        pair = self.tokens.generate_token_pair(profile.id, {"email": profile.email})
        hashed = self.hasher.hash(pair.refresh_token)
        with self.rw_uow() as uow:
            if uow.refresh_tokens.delete_by_jti(dto.jti) == 0:
                log.warning("auth.refresh_failed reason=already_rotated jti=%s", dto.jti)
                raise UnauthorizedError(INVALID_REFRESH_TOKEN)
            uow.refresh_tokens.create(
                user_id=profile.id,
                hashed_token=hashed,
                jti=pair.refresh_token_jti,
                expires_at=pair.refresh_token_expires_at,
            )

        log.info("auth.refresh user_id=%s old_jti=%s", profile.id, dto.jti)
        return AuthResultOut(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            user=profile,
        )

    # ------------------------------------------------------------------ #
    # Revoke / logout
    # ------------------------------------------------------------------ #

    def revoke(self, dto: RevokeIn) -> MessageOut:
        """
        End one refresh session: tombstone its jti and delete its row.

        Only the refresh session is affected; access tokens stay valid until
        they expire unless revoked themselves.

        :raises TokenNotFoundError: If no session with ``jti`` belongs to the caller.
        """
        with self.ro_uow() as uow:
            stored = uow.refresh_tokens.find_by_jti(dto.jti)
            if stored is None or stored.user_id != dto.user_id:
                raise TokenNotFoundError(key=dto.jti)
            expires_at = as_utc(stored.expires_at)

        self.revocation.revoke_token(dto.jti, dto.user_id, expires_at, reason="logout")
        with self.rw_uow() as uow:
            uow.refresh_tokens.delete_by_jti(dto.jti)
        log.info("auth.revoke user_id=%s jti=%s", dto.user_id, dto.jti)
        return MessageOut("Token revoked successfully")

    def logout(self, dto: LogoutIn) -> MessageOut:
        """
        Revoke the access token used for the request, and optionally sessions.

        A supplied ``refresh_token`` is checked and revoked first; when it is
        rejected the access token stays valid.

        :raises InvalidOrExpiredTokenError: If ``refresh_token`` does not verify.
        :raises TokenNotFoundError: If ``refresh_token`` belongs to no session of the caller.
        """
        if dto.refresh_token:
            payload = self.tokens.verify_refresh_token(dto.refresh_token)
            if payload.subject != str(dto.user_id):
                raise TokenNotFoundError(key=payload.jti)
            self.revoke(RevokeIn(user_id=dto.user_id, jti=payload.jti))

        self.revocation.revoke_token(
            dto.access_jti, dto.user_id, dto.access_expires_at, reason="logout"
        )

        if dto.all_sessions:
            self._revoke_all_sessions(dto.user_id)
        return MessageOut("Token revoked successfully")

    def _revoke_all_sessions(self, user_id: int) -> None:
        with self.ro_uow() as uow:
            sessions = [
                (row.jti, as_utc(row.expires_at))
                for row in uow.refresh_tokens.list_by_user_id(user_id)
            ]
        for jti, expires_at in sessions:
            self.revocation.revoke_token(jti, user_id, expires_at, reason="logout_all")
        with self.rw_uow() as uow:
            removed = uow.refresh_tokens.delete_by_user_id(user_id)
        log.info("auth.logout_all user_id=%s sessions_removed=%s", user_id, removed)

    # ------------------------------------------------------------------ #
    # Profile
    # ------------------------------------------------------------------ #

    def get_me(self, user_id: int) -> UserPublicOut:
        """
        Return the caller's public profile.

        :raises UnauthorizedError: If the account no longer exists.
        """
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise UnauthorizedError("User not found")
            return self._public(user)

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _issue_session(self, profile: UserPublicOut) -> AuthResultOut:
        pair = self.tokens.generate_token_pair(profile.id, {"email": profile.email})
        with self.rw_uow() as uow:
            uow.refresh_tokens.create(
                user_id=profile.id,
                hashed_token=self.hasher.hash(pair.refresh_token),
                jti=pair.refresh_token_jti,
                expires_at=pair.refresh_token_expires_at,
            )
        return AuthResultOut(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            user=profile,
        )

    @staticmethod
    def _public(user: User) -> UserPublicOut:
        return UserPublicOut(
            id=user.id,
            email=user.email,
            name=user.name,
            email_verified=bool(user.email_verified),
        )

    @staticmethod
    def _send_best_effort(send: Callable[[str, str], None], to_email: str, token: str) -> None:
        """Deliver an email; a failure is logged and never reaches the caller."""
        try:
            send(to_email, token)
        except Exception:
            log.error("auth.email_failed kind=%s", getattr(send, "__name__", "send"), exc_info=True)
