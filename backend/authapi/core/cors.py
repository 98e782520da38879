"""Flask-CORS setup for ``/api/*``."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from authapi.core.logger import REQUEST_ID_HEADER


def parse_origins(raw: str | None) -> list[str] | None:
    """Split ``CORS_ORIGINS``; ``None`` means "any origin" (blank or ``*``)."""
    origins = [o.strip() for o in (raw or "").split(",") if o.strip()]
    if not origins or origins == ["*"]:
        return None
    return origins


def init_app(app: Flask) -> None:
    """Allow browser clients to send bearer tokens and read the request id.

    Credentials are only enabled for an explicit origin list; a wildcard
    policy never sends ``Access-Control-Allow-Credentials``.
    """
    origins = parse_origins(app.config.get("CORS_ORIGINS"))
    CORS(
        app,
        resources={r"/api/*": {"origins": origins or "*"}},
        supports_credentials=origins is not None,
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
