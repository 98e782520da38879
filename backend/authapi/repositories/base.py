"""Generic repository base for SQLAlchemy 2.x.

Repositories are persistence-only. They never commit or roll back (the Unit
of Work owns the transaction) and never implement auth rules.

Shared helpers:

- equality lookups restricted to a per-repository filter whitelist;
- ``add_unique``: insert inside a SAVEPOINT and turn a unique-key collision
  into :class:`~authapi.services._shared.errors.ConflictError`, leaving the
  outer transaction usable;
- ``delete_where``: bulk ``DELETE`` returning the affected row count.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import ColumnElement, Select, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import InstrumentedAttribute, Session

from authapi.core.extensions import db
from authapi.services._shared.errors import ConflictError, violates

E = TypeVar("E")  # mapped entity


class BaseRepository(Generic[E]):
    """Persistence helpers for a single mapped class.

    Subclasses set ``model`` and override :meth:`_filterable_fields`.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """
        :param session: Session of the enclosing Unit of Work. Defaults to the
            Flask-scoped ``db.session``.
        :type session: :class:`sqlalchemy.orm.Session` | None
        """
        self._session = session

    @property
    def session(self) -> Session:
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Whitelists -------------------------------

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        """Public filter key → column. Keys outside the map are rejected."""
        return {}

    def _where(self, stmt: Select[Any], filters: Mapping[str, Any]) -> Select[Any]:
        allowed = self._filterable_fields()
        unknown = sorted(set(filters) - set(allowed))
        if unknown:
            raise ValueError(f"{type(self).__name__}: unsupported filters {unknown}")
        for key, value in filters.items():
            stmt = stmt.where(allowed[key] == value)
        return stmt

    # -------------------------------- Reads ----------------------------------

    def get(self, entity_id: Any) -> E | None:
        """Return the row with primary key ``entity_id`` or ``None``."""
        return self.session.get(self.model, entity_id)

    def find_one(self, **filters: Any) -> E | None:
        """First row matching all equality ``filters``.

        :raises ValueError: On a filter key outside the whitelist.
        """
        stmt = self._where(select(self.model), filters)
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def exists(self, **filters: Any) -> bool:
        stmt = self._where(select(func.count()).select_from(self.model), filters)
        return bool(self.session.execute(stmt).scalar())

    # -------------------------------- Writes ---------------------------------

    def add_unique(
        self,
        instance: E,
        *,
        constraint: tuple[str, ...],
        entity: str,
        detail: str,
    ) -> E:
        """Insert ``instance`` inside a SAVEPOINT.

        Only a violation of ``constraint`` becomes a conflict; any other
        integrity failure (foreign key, NOT NULL...) propagates unchanged.

        :param constraint: Names the backend may report for the unique key,
            e.g. ``("uq_users_email", "users.email")``.
        :type constraint: tuple[str, ...]
        :param entity: Entity label of the raised conflict.
        :type entity: str
        :param detail: Human-readable conflict detail.
        :type detail: str
        :returns: The flushed instance.
        :raises ConflictError: If a unique constraint rejects the row.
        """
        try:
            with self.session.begin_nested():
                self.session.add(instance)
        except IntegrityError as exc:
            if not any(violates(exc, name) for name in constraint):
                raise
            raise ConflictError(entity, detail) from exc
        return instance

    def delete_where(self, *criteria: ColumnElement[bool]) -> int:
        """Bulk ``DELETE`` of rows matching ``criteria``.

        Two transactions deleting the same row see rowcounts ``1`` and ``0``,
        which is how a single winner is picked.

        :returns: Deleted row count.
        :rtype: int
        """
        stmt = delete(self.model).where(*criteria).execution_options(synchronize_session=False)
        result = self.session.execute(stmt)
        return int(getattr(result, "rowcount", 0) or 0)
