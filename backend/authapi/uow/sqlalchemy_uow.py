"""
SQLAlchemy implementations of :class:`~authapi.uow.base.UnitOfWork`.

Both flavours wrap the Flask-scoped ``db.session`` so every repository of a
use-case shares one transaction:

- :class:`SQLAlchemyUnitOfWork` commits on a clean exit and rolls back otherwise.
- :class:`SQLAlchemyReadOnlyUnitOfWork` always rolls back and refuses writes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from authapi.core.extensions import db
from authapi.repositories import (
    RefreshTokenRepository,
    RevokedTokenRepository,
    UserRepository,
)
from authapi.uow.base import ReadOnlyViolationError, UnitOfWork

log = logging.getLogger(__name__)

# First SQL keyword of statements a read-only scope never lets through.
WRITE_KEYWORDS: frozenset[str] = frozenset(
    {
        "insert",
        "update",
        "delete",
        "merge",
        "replace",
        "upsert",
        "create",
        "alter",
        "drop",
        "truncate",
        "grant",
        "revoke",
    }
)

ISOLATION_LEVELS: frozenset[str] = frozenset(
    {"READ UNCOMMITTED", "READ COMMITTED", "REPEATABLE READ", "SERIALIZABLE"}
)


class SQLAlchemyRepositoryContainer:
    """Repositories of the auth domain bound to one session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=session)
        self.refresh_tokens = RefreshTokenRepository(session=session)
        self.revoked_tokens = RevokedTokenRepository(session=session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """Read-write scope: commit on success, rollback on any exception."""

    def __init__(self) -> None:
        super().__init__(session=db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # The session autobegins on first use.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


def _make_flush_guard() -> Callable[..., None]:
    def _before_flush(session: Session, flush_context: Any, instances: Any) -> None:
        if session.new or session.dirty or session.deleted:
            raise ReadOnlyViolationError("ORM flush with pending changes")

    return _before_flush


def _make_statement_guard() -> Callable[..., None]:
    def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        keyword = statement.lstrip().split(None, 1)[0].lower() if statement else ""
        if keyword in WRITE_KEYWORDS:
            raise ReadOnlyViolationError(f"{keyword.upper()} statement")

    return _before_cursor_execute


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only scope over the Flask-scoped session.

    On entry the scope tries to own a fresh transaction. When it does, and the
    dialect supports it, ``SET TRANSACTION ISOLATION LEVEL`` and
    ``SET TRANSACTION READ ONLY`` are issued. When a transaction is already
    running on the session the scope joins it without directives.

    In both cases ORM flushes with pending objects and DML/DDL statements on
    the connection raise :class:`~authapi.uow.base.ReadOnlyViolationError`
    until the scope exits. Exit always rolls back an owned transaction.

    Parameters
    ----------
    isolation_level:
        Isolation hint such as ``"READ COMMITTED"``; ``None`` keeps the
        connection default.
    enforce_db_readonly:
        Issue ``SET TRANSACTION READ ONLY`` on PostgreSQL and MySQL/MariaDB.

    Notes
    -----
    SQLite has no ``SET TRANSACTION``; only the guards apply there.
    """

    def __init__(
        self,
        *,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=db.session)
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly
        self._txn: SessionTransaction | None = None
        self._conn: Connection | None = None
        self._flush_guard: Callable[..., None] | None = None
        self._statement_guard: Callable[..., None] | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        try:
            self._txn = self.session.begin()
        except InvalidRequestError:
            # Already inside a transaction (autobegin or an outer scope).
            self._txn = None

        self._conn = self.session.connection()
        self._install_guards()
        if self._txn is not None:
            self._apply_transaction_directives(self._conn.dialect.name)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._txn is not None:
                self._txn.rollback()
        finally:
            self._txn = None
            self._remove_guards()
            self._conn = None

    def commit(self) -> None:
        """
        Refuse to commit.

        :raises ReadOnlyViolationError: Always.
        """
        raise ReadOnlyViolationError("commit()")

    def rollback(self) -> None:
        self.session.rollback()

    def _apply_transaction_directives(self, dialect: str) -> None:
        if dialect == "sqlite":
            return
        try:
            if self.isolation_level:
                level = self.isolation_level.upper().strip()
                if level not in ISOLATION_LEVELS:
                    log.warning("uow.unknown_isolation_level level=%s", level)
                self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {level}"))
            if self.enforce_db_readonly and dialect in ("postgresql", "mysql", "mariadb"):
                self.session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            log.warning("uow.set_transaction_failed dialect=%s error=%s", dialect, exc)

    def _install_guards(self) -> None:
        if self._statement_guard is not None:
            return
        self._flush_guard = _make_flush_guard()
        event.listen(self.session, "before_flush", self._flush_guard)
        self._statement_guard = _make_statement_guard()
        event.listen(self._conn, "before_cursor_execute", self._statement_guard)

    def _remove_guards(self) -> None:
        if self._statement_guard is None:
            return
        if self._flush_guard is not None and event.contains(
            self.session, "before_flush", self._flush_guard
        ):
            event.remove(self.session, "before_flush", self._flush_guard)
        if self._conn is not None and event.contains(
            self._conn, "before_cursor_execute", self._statement_guard
        ):
            event.remove(self._conn, "before_cursor_execute", self._statement_guard)
        self._flush_guard = None
        self._statement_guard = None
