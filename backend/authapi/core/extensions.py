"""Flask extension instances and initialization helpers."""

from __future__ import annotations

import logging
from urllib.parse import urlsplit

import redis  # type: ignore[import-untyped]
from flask import Flask
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData, event
from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Import-safe extension objects; per-app state lives in ``app.extensions``.
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, migrations, JWT and the optional Redis client.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`authapi.models` package to ensure SQLAlchemy metadata is ready
        for migrations.

    Notes
    -----
    An unreachable Redis at startup is logged, not fatal: revocation checks
    fall back to the database while the cache is down.
    """
    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from authapi import models as _models  # noqa: F401

    migrate.init_app(app, db)

    with app.app_context():
        if db.engine.dialect.name == "sqlite":
            _enable_sqlite_transactions(db.engine)

    jwt.init_app(app)

    redis_url = app.config.get("REDIS_URL")
    if not redis_url:
        app.extensions.pop("redis_client", None)
        return

    client = redis.Redis.from_url(
        redis_url,
        decode_responses=True,
        socket_timeout=app.config.get("REDIS_SOCKET_TIMEOUT", 2.0),
        socket_connect_timeout=app.config.get("REDIS_CONNECT_TIMEOUT", 2.0),
    )
    try:
        client.ping()
    except RedisError:
        log.warning("redis.unreachable url=%s", redis_location(redis_url), exc_info=True)
    app.extensions["redis_client"] = client


def redis_location(url: str) -> str:
    """Return ``url`` without credentials or query, safe to log."""
    parts = urlsplit(url)
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    return f"{parts.scheme}://{host}{parts.path}"


def _enable_sqlite_transactions(engine: Engine) -> None:
    """Let SQLAlchemy, not pysqlite, emit ``BEGIN``.

    pysqlite defers ``BEGIN`` until the first DML statement, so a leading
    ``SAVEPOINT`` opens (and its ``RELEASE`` commits) the whole transaction.
    Also turns on foreign keys, which SQLite leaves off by default.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")
