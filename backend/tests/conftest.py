"""Pytest fixtures configuring the app, an isolated database and adapters.

The schema is created once per session on an in-memory SQLite database.
Services own their transactions (they commit and roll back themselves), so
isolation comes from emptying every table after each test instead of a
wrapping SAVEPOINT.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator
from typing import Any

import fakeredis
import pytest
from flask import Flask
from sqlalchemy import delete

from authapi.core.config import TestingConfig
from authapi.core.extensions import db as _db  # Flask-SQLAlchemy instance
from authapi.factory import create_app  # application factory under test
from authapi.infra.redis.redis_revocation_cache import RedisRevocationCache
from authapi.services._shared.ports import InMemoryEmailSender
from tests.factories import SQLAlchemySession


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Avoids hitting external services (Redis and SMTP are replaced per test).
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    LOG_LEVEL = "WARNING"


@pytest.fixture(scope="session")
def app() -> Flask:
    """Create a Flask application configured for testing."""
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    os.environ.pop("REDIS_URL", None)
    application = create_app(TestConfig)
    application.logger.setLevel("WARNING")
    return application


@pytest.fixture(scope="session")
def db(app: Flask) -> Generator[Any, None, None]:
    """Create database tables once per test session."""
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def session(db: Any) -> Generator[Any, None, None]:
    """Yield the app session and empty every table afterwards."""
    try:
        yield db.session
    finally:
        db.session.rollback()
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(delete(table))
        db.session.commit()
        db.session.remove()


@pytest.fixture()
def redis_client() -> fakeredis.FakeRedis:
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture()
def revocation_cache(redis_client: fakeredis.FakeRedis) -> RedisRevocationCache:
    return RedisRevocationCache(redis_client)


@pytest.fixture()
def outbox() -> InMemoryEmailSender:
    return InMemoryEmailSender()


@pytest.fixture(autouse=True)
def _app_adapters(
    app: Flask,
    session: Any,
    revocation_cache: RedisRevocationCache,
    outbox: InMemoryEmailSender,
) -> Generator[None, None, None]:
    """Swap per-test adapters into the app: fakeredis cache and a captured outbox."""
    previous = {
        key: app.extensions.get(key) for key in ("revocation_cache", "email_sender")
    }
    app.extensions["revocation_cache"] = revocation_cache
    app.extensions["email_sender"] = outbox
    SQLAlchemySession.set(session)
    try:
        yield
    finally:
        app.extensions.update(previous)


@pytest.fixture()
def client(app: Flask):
    """Return a Flask test client."""
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


@pytest.fixture()
def freeze_time() -> Callable[[str | None], Any]:
    """Factory returning :func:`freezegun.freeze_time`.

    Examples
    --------
    >>> def test_with_frozen_time(freeze_time):
    ...     with freeze_time("2024-01-01"):
    ...         ...
    """
    from freezegun import freeze_time as _freeze_time

    def _factory(target: str | None = None) -> Any:
        return _freeze_time(target or "2024-01-01")

    return _factory
