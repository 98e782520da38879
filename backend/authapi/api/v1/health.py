"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from authapi.api.deps import json_response, timing
from authapi.core.container import revocation_cache
from authapi.core.extensions import db

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Return application, database and revocation-cache health.

    A failing cache degrades the status but revocation still works through
    the database, so the endpoint answers 200 unless the database is down.
    """

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("healthcheck.db_error")
        db_status = "fail"
    cache_status = "ok" if revocation_cache().ping() else "fail"

    if db_status != "ok":
        status, code = "fail", 503
    elif cache_status != "ok":
        status, code = "degraded", 200
    else:
        status, code = "ok", 200
    version = current_app.config.get("APP_VERSION", "dev")
    payload = {"status": status, "db": db_status, "cache": cache_status, "version": version}
    return json_response(payload, status=code)
