"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, TypeVar

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import get_jwt, verify_jwt_in_request

from authapi.core.errors import Unauthorized

F = TypeVar("F", bound=Callable[..., Any])

BEARER_PREFIX = "bearer "


def require_access_token(func: F) -> F:
    """Ensure the request carries a valid, unrevoked access token.

    Refresh tokens are rejected with 401 by ``flask-jwt-extended``.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request()
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_refresh_token(func: F) -> F:
    """Ensure the request carries a valid, unrevoked refresh token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(refresh=True)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_user_id() -> int:
    """Return the numeric subject of the verified token.

    :raises Unauthorized: When ``sub`` is not an integer id.
    """
    subject = get_jwt().get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError):
        raise Unauthorized("Invalid or expired token") from None


def current_jti() -> str:
    return str(get_jwt()["jti"])


def current_expires_at() -> datetime:
    return datetime.fromtimestamp(int(get_jwt()["exp"]), tz=UTC)


def bearer_token() -> str:
    """Return the raw token from ``Authorization: Bearer <token>``."""
    header = request.headers.get("Authorization", "")
    if not header.lower().startswith(BEARER_PREFIX):
        raise Unauthorized("Missing bearer token")
    return header[len(BEARER_PREFIX) :].strip()


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
