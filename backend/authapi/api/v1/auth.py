"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, request

from authapi.api.deps import (
    bearer_token,
    current_expires_at,
    current_jti,
    current_user_id,
    json_response,
    require_access_token,
    require_refresh_token,
    timing,
)
from authapi.core.container import auth_service
from authapi.schemas import (
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
from authapi.services.auth.dto import (
    ForgotPasswordIn,
    LoginIn,
    LogoutIn,
    RefreshIn,
    RegisterIn,
    ResetPasswordIn,
    VerifyEmailIn,
)

bp = Blueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
login_schema = LoginSchema()
verify_email_schema = VerifyEmailSchema()
forgot_password_schema = ForgotPasswordSchema()
reset_password_schema = ResetPasswordSchema()
revoke_schema = RevokeSchema()
auth_result_schema = AuthResultSchema()
user_schema = UserPublicSchema()
message_schema = MessageSchema()


def _body() -> dict:
    return request.get_json(silent=True) or {}


@bp.post("/register")
@timing
def register():
    """Create an unverified account and send the verification email."""

    data = register_schema.load(_body())
    result = auth_service().register(RegisterIn(**data))
    return json_response(message_schema.dump(result), status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue a token pair."""

    data = login_schema.load(_body())
    result = auth_service().login(LoginIn(**data))
    return json_response(auth_result_schema.dump(result))


@bp.post("/verify-email")
@timing
def verify_email():
    data = verify_email_schema.load(_body())
    result = auth_service().verify_email(VerifyEmailIn(**data))
    return json_response(message_schema.dump(result))


@bp.post("/forgot-password")
@timing
def forgot_password():
    """Always answer the same way, whether or not the account exists."""

    data = forgot_password_schema.load(_body())
    result = auth_service().forgot_password(ForgotPasswordIn(**data))
    return json_response(message_schema.dump(result))


@bp.post("/reset-password")
@timing
def reset_password():
    data = reset_password_schema.load(_body())
    result = auth_service().reset_password(ResetPasswordIn(**data))
    return json_response(message_schema.dump(result))


@bp.post("/refresh")
@require_refresh_token
@timing
def refresh():
    """Rotate the presented refresh token into a new pair."""

    dto = RefreshIn(user_id=current_user_id(), refresh_token=bearer_token(), jti=current_jti())
    result = auth_service().refresh(dto)
    return json_response(auth_result_schema.dump(result))


@bp.post("/revoke")
@require_access_token
@timing
def revoke():
    """Revoke the calling access token, plus the given session or all sessions."""

    data = revoke_schema.load(_body())
    dto = LogoutIn(
        user_id=current_user_id(),
        access_jti=current_jti(),
        access_expires_at=current_expires_at(),
        refresh_token=data["refresh_token"],
        all_sessions=data["all_sessions"],
    )
    result = auth_service().logout(dto)
    return json_response(message_schema.dump(result))


@bp.get("/me")
@require_access_token
@timing
def me():
    """Return the authenticated user profile."""

    profile = auth_service().get_me(current_user_id())
    return json_response({"user": user_schema.dump(profile)})
