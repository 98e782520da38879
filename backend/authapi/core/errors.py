"""RFC 7807 (``application/problem+json``) error rendering for the API.

Every error leaving the app has the shape::

    {"type": "about:blank", "title": "Unauthorized", "status": 401,
     "detail": "...", "instance": "/api/v1/auth/me", "code": "token_expired",
     "request_id": "..."}

plus an optional ``details`` object (validation messages).
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, has_request_context, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from authapi.core.logger import ensure_request_id
from authapi.services._shared.errors import ServiceError

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"

# Stable ``code`` for plain HTTP failures (routing, method, body size...).
_HTTP_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    413: "payload_too_large",
    415: "unsupported_media_type",
    429: "too_many_requests",
    500: "internal_server_error",
    503: "service_unavailable",
}


class APIError(Exception):
    """
    HTTP-facing error carrying status, stable code and client-safe message.

    Parameters
    ----------
    message : str
        Human-readable description presented to clients.
    status_code : int, optional
        HTTP status. Defaults to ``400``.
    code : str, optional
        Machine-readable snake_case identifier. Defaults to ``"bad_request"``.
    details : dict[str, Any] | None, optional
        Structured, client-safe context.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}


class NotFound(APIError):
    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=HTTPStatus.NOT_FOUND, code="not_found")


class Conflict(APIError):
    def __init__(self, message: str = "Conflict") -> None:
        super().__init__(message, status_code=HTTPStatus.CONFLICT, code="conflict")


class Unauthorized(APIError):
    def __init__(self, message: str = "Unauthorized", code: str = "unauthorized") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED, code=code)


def problem_body(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build the problem-details mapping.

    :param status: HTTP status code.
    :param code: Stable machine-consumable error code.
    :param message: Client-safe summary, rendered as ``detail``.
    :param details: Optional structured details.
    :rtype: dict
    """
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": int(status),
        "detail": message,
        "instance": request.path if has_request_context() else None,
        "code": code,
        "request_id": ensure_request_id(),
    }
    if details:
        body["details"] = details
    return body


def problem(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
    exc_info: bool = False,
) -> tuple[Response, int]:
    """
    Log and return a ready ``(response, status)`` problem pair.

    4xx are logged as warnings, 5xx as errors. Also used by callbacks that
    must return a response instead of raising (the JWT loaders).
    """
    body = problem_body(status=status, code=code, message=message, details=details)
    level = logging.ERROR if status >= 500 else logging.WARNING
    log.log(
        level,
        "http.problem status=%s code=%s detail=%s",
        int(status),
        code,
        message,
        exc_info=exc_info,
    )
    resp = jsonify(body)
    resp.mimetype = PROBLEM_MIMETYPE
    return resp, int(status)


def render_api_error(err: APIError) -> tuple[Response, int]:
    return problem(
        status=err.status_code,
        code=err.code,
        message=err.message,
        details=err.details or None,
    )


def render_unexpected() -> tuple[Response, int]:
    # Never leak internals; the traceback goes to the log only.
    return problem(
        status=HTTPStatus.INTERNAL_SERVER_ERROR,
        code="internal_server_error",
        message="Unexpected error",
        exc_info=True,
    )


def init_app(app: Flask) -> None:
    """Register problem+json handlers for every error the app can raise."""

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        return render_api_error(err)

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        from authapi.services._shared.base import BaseService

        translated = BaseService.translate_exceptions(err)
        if isinstance(translated, APIError):
            return render_api_error(translated)
        return render_unexpected()

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        return problem(
            status=HTTPStatus.BAD_REQUEST,
            code="validation_error",
            message="Validation failed",
            details={"errors": err.messages},
        )

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        code = _HTTP_CODES.get(status, "error")
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        else:
            message = (err.description or code.replace("_", " ").capitalize()).strip()
        return problem(status=status, code=code, message=message)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        return problem(
            status=HTTPStatus.CONFLICT,
            code="conflict",
            message="Resource conflict",
            exc_info=True,
        )

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        return problem(
            status=HTTPStatus.SERVICE_UNAVAILABLE,
            code="service_unavailable",
            message="Service temporarily unavailable",
            exc_info=True,
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        return render_unexpected()
