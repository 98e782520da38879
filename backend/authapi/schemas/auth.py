"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, post_load, validate


class _EmailNormalizingSchema(Schema):
    email = fields.Email(required=True, validate=validate.Length(max=254))

    @post_load
    def _normalize_email(self, data: dict, **kwargs):
        data["email"] = data["email"].strip().lower()
        return data


class RegisterSchema(_EmailNormalizingSchema):
    """Input payload for account registration."""

    password = fields.String(required=True, validate=validate.Length(min=8, max=128))
    name = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=100))


class LoginSchema(_EmailNormalizingSchema):
    """Input payload for authenticating a user."""

    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class VerifyEmailSchema(Schema):
    token = fields.String(required=True, validate=validate.Length(min=1, max=256))


class ForgotPasswordSchema(_EmailNormalizingSchema):
    pass


class ResetPasswordSchema(Schema):
    token = fields.String(required=True, validate=validate.Length(min=1, max=256))
    password = fields.String(required=True, validate=validate.Length(min=8, max=128))


class RevokeSchema(Schema):
    """Input payload for ``/auth/revoke``.

    The access token of the request is always revoked; ``refresh_token`` and
    ``all_sessions`` widen the scope.
    """

    refresh_token = fields.String(load_default=None, allow_none=True)
    all_sessions = fields.Boolean(load_default=False)


class UserPublicSchema(Schema):
    """Public projection of an account."""

    id = fields.Integer(required=True)
    email = fields.Email(required=True)
    name = fields.String(allow_none=True)
    email_verified = fields.Boolean(required=True)


class AuthResultSchema(Schema):
    """Response payload with a token pair and the user profile."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    token_type = fields.Constant("Bearer")
    user = fields.Nested(UserPublicSchema, required=True)


class MessageSchema(Schema):
    message = fields.String(required=True)
