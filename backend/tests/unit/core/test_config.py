"""Unit tests for configuration selection and secret validation."""

from __future__ import annotations

import pytest
from authapi.core.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    env_bool,
    get_config,
    validate_secrets,
)
from authapi.factory import create_app

STRONG_ACCESS = "A" * 40
STRONG_REFRESH = "R" * 40


@pytest.mark.parametrize(
    ("value", "expected"),
    [("production", ProductionConfig), ("testing", TestingConfig), ("nope", DevelopmentConfig)],
)
def test_get_config(monkeypatch, value, expected):
    monkeypatch.setenv("APP_ENV", value)
    assert get_config() is expected


def test_env_bool(monkeypatch):
    monkeypatch.setenv("FLAG", "Yes")
    assert env_bool("FLAG") is True
    monkeypatch.setenv("FLAG", "0")
    assert env_bool("FLAG", True) is False
    monkeypatch.delenv("FLAG")
    assert env_bool("FLAG", True) is True


def test_validate_secrets_accepts_strong_distinct_secrets():
    validate_secrets({"JWT_ACCESS_SECRET": STRONG_ACCESS, "JWT_REFRESH_SECRET": STRONG_REFRESH})


@pytest.mark.parametrize(
    ("access", "refresh", "fragment"),
    [
        ("CHANGE_ME_ACCESS", STRONG_REFRESH, "must be set"),
        (STRONG_ACCESS, "", "must be set"),
        ("short", STRONG_REFRESH, "at least 32"),
        (STRONG_ACCESS, STRONG_ACCESS, "must differ"),
    ],
)
def test_validate_secrets_rejects_weak_config(access, refresh, fragment):
    with pytest.raises(RuntimeError, match=fragment):
        validate_secrets({"JWT_ACCESS_SECRET": access, "JWT_REFRESH_SECRET": refresh})


def test_production_app_refuses_default_secrets():
    class WeakProduction(ProductionConfig):
        JWT_ACCESS_SECRET = "CHANGE_ME_ACCESS"
        JWT_REFRESH_SECRET = "CHANGE_ME_REFRESH"
        SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
        REDIS_URL = None

    with pytest.raises(RuntimeError):
        create_app(WeakProduction)
