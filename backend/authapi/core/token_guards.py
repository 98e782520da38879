"""Bearer-token verification hooks for ``flask-jwt-extended``.

``flask-jwt-extended`` parses the ``Authorization`` header, checks signature,
expiry and token type; these callbacks plug in our two-secret scheme, the
revocation lookup and RFC 7807 error bodies.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask

from authapi.core.errors import problem
from authapi.core.extensions import jwt
from authapi.services._shared.ports.token_codec import REFRESH_TOKEN_TYPE

log = logging.getLogger(__name__)


def _unauthorized(message: str, code: str = "unauthorized"):
    return problem(status=HTTPStatus.UNAUTHORIZED, code=code, message=message)


def init_app(app: Flask) -> None:
    """Register JWT callbacks. ``jwt`` must already be bound to ``app``."""

    @jwt.decode_key_loader
    def _decode_key(jwt_header: dict[str, Any], jwt_data: dict[str, Any]) -> str:
        # ``type`` is read before verification; a forged value only selects a
        # secret the token was not signed with, so verification still fails.
        from authapi.core.container import token_codec

        token_type = jwt_data.get("type")
        codec = token_codec()
        if token_type == REFRESH_TOKEN_TYPE:
            return codec.secret_for(REFRESH_TOKEN_TYPE)  # type: ignore[attr-defined]
        return codec.secret_for("access")  # type: ignore[attr-defined]

    @jwt.token_in_blocklist_loader
    def _is_revoked(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]) -> bool:
        from authapi.core.container import revocation_service

        jti = jwt_payload.get("jti")
        if not jti:
            return True
        return revocation_service().is_revoked(jti)

    @jwt.expired_token_loader
    def _expired(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]):
        return _unauthorized("Token has expired", code="token_expired")

    @jwt.invalid_token_loader
    def _invalid(reason: str):
        log.info("auth.invalid_token reason=%s", reason)
        return _unauthorized("Invalid or expired token", code="invalid_token")

    @jwt.unauthorized_loader
    def _missing(reason: str):
        return _unauthorized("Missing bearer token")

    @jwt.revoked_token_loader
    def _revoked(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]):
        log.info("auth.revoked_token jti=%s", jwt_payload.get("jti"))
        return _unauthorized("Token has been revoked", code="token_revoked")
