"""Unit tests for service-error translation."""

from __future__ import annotations

import pytest
from authapi.core import errors as api_errors
from authapi.services._shared.base import BaseService
from authapi.services._shared.errors import (
    ConflictError,
    InvalidCredentialsError,
    InvalidOneTimeTokenError,
    ServiceError,
    StorageError,
    TokenNotFoundError,
    UnverifiedEmailError,
)


@pytest.mark.parametrize(
    ("exc", "status", "code"),
    [
        (TokenNotFoundError(key="j"), 404, "not_found"),
        (ConflictError("User", "Email already registered"), 409, "conflict"),
        (InvalidCredentialsError(), 401, "unauthorized"),
        (InvalidOneTimeTokenError("reset"), 400, "invalid_token"),
        (StorageError("revoke_token"), 503, "service_unavailable"),
        (ServiceError("odd"), 400, "bad_request"),
    ],
)
def test_translate_exceptions(exc, status, code):
    translated = BaseService.translate_exceptions(exc)

    assert isinstance(translated, api_errors.APIError)
    assert translated.status_code == status
    assert translated.code == code


def test_unverified_email_renders_like_bad_credentials():
    a = BaseService.translate_exceptions(InvalidCredentialsError())
    b = BaseService.translate_exceptions(UnverifiedEmailError())

    assert (a.status_code, a.message) == (b.status_code, b.message) == (401, "Invalid credentials")


def test_storage_error_hides_operation():
    translated = BaseService.translate_exceptions(StorageError("revoke_token"))
    assert "revoke_token" not in translated.message


def test_non_service_errors_pass_through():
    err = KeyError("x")
    assert BaseService.translate_exceptions(err) is err
