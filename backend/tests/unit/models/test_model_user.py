"""Unit tests for the User model helpers."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from authapi.models import User

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


def test_email_is_normalized():
    user = User(email="  Jane.Doe@Example.COM ", password_hash="x")
    assert user.email == "jane.doe@example.com"


@pytest.mark.parametrize("email", ["", "no-at-sign", "a@localhost"])
def test_invalid_email_rejected(email):
    with pytest.raises(ValueError):
        User(email=email, password_hash="x")


def test_email_verification_window():
    user = User(email="a@b.io", password_hash="x")
    assert not user.is_email_verification_valid(NOW)

    user.email_verification_token = "d" * 64
    user.email_verification_expires = NOW + timedelta(hours=1)
    assert user.is_email_verification_valid(NOW)
    assert not user.is_email_verification_valid(NOW + timedelta(hours=2))

    # Naive timestamps (as read back from SQLite) are treated as UTC.
    user.email_verification_expires = (NOW + timedelta(minutes=1)).replace(tzinfo=None)
    assert user.is_email_verification_valid(NOW)


def test_mark_email_verified_clears_token():
    user = User(email="a@b.io", password_hash="x")
    user.email_verification_token = "d" * 64
    user.email_verification_expires = NOW

    user.mark_email_verified(NOW)

    assert user.email_verified is True
    assert user.email_verified_at == NOW
    assert user.email_verification_token is None
    assert user.email_verification_expires is None


def test_password_reset_window_and_clear():
    user = User(email="a@b.io", password_hash="x")
    user.password_reset_token = "r" * 64
    user.password_reset_expires = NOW + timedelta(minutes=30)

    assert user.is_password_reset_valid(NOW)
    user.clear_password_reset()
    assert not user.is_password_reset_valid(NOW)
