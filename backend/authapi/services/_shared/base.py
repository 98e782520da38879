# authapi/services/_shared/base.py
from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from authapi.core import errors as api_errors
from authapi.services._shared.errors import (
    ConflictError,
    InvalidOneTimeTokenError,
    NotFoundError,
    ServiceError,
    StorageError,
    UnauthorizedError,
)
from authapi.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

_Translation = tuple[type[ServiceError], Callable[[ServiceError], api_errors.APIError]]

# Most specific first: the first matching class wins.
_TRANSLATIONS: tuple[_Translation, ...] = (
    (NotFoundError, lambda exc: api_errors.NotFound(str(exc))),
    (ConflictError, lambda exc: api_errors.Conflict(exc.detail)),  # type: ignore[attr-defined]
    # Subclasses (bad password, unverified email...) share the parent's message.
    (UnauthorizedError, lambda exc: api_errors.Unauthorized(str(exc))),
    (
        InvalidOneTimeTokenError,
        lambda exc: api_errors.APIError(str(exc), status_code=400, code="invalid_token"),
    ),
    (
        StorageError,
        lambda exc: api_errors.APIError(
            "Service temporarily unavailable", status_code=503, code="service_unavailable"
        ),
    ),
    (ServiceError, lambda exc: api_errors.APIError(str(exc), status_code=400, code="bad_request")),
)


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Open read-only and read-write units of work.
    * Translate service errors into HTTP errors.

    Notes
    -----
    Services never touch ``db.session`` directly; repositories are reached
    through a Unit of Work.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """Read-write Unit of Work: commits on success."""
        return SQLAlchemyUnitOfWork()

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param isolation: Transaction isolation level (e.g. "READ COMMITTED").
        :type isolation: str | None
        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        :type enforce_db_readonly: bool
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(UTC)

    # -------------------------- Error handling ------------------------------

    @staticmethod
    def translate_exceptions(exc: Exception) -> Exception:
        """
        Map a service error to its HTTP counterpart.

        ``StorageError`` keeps the failed operation out of the client message.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: An :class:`~authapi.core.errors.APIError`, or ``exc`` itself
            when it is not a service error.
        :rtype: Exception
        """
        for kind, build in _TRANSLATIONS:
            if isinstance(exc, kind):
                return build(exc)
        return exc
