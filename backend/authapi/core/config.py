"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

DEFAULT_ACCESS_SECRET: Final[str] = "CHANGE_ME_ACCESS"
DEFAULT_REFRESH_SECRET: Final[str] = "CHANGE_ME_REFRESH"
MIN_SECRET_LENGTH: Final[int] = 32

# Load .env during development (no-op when the file is missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret. Not used for tokens.
    JWT_ACCESS_SECRET / JWT_REFRESH_SECRET: str
        Independent signing secrets for access and refresh tokens.
    JWT_ACCESS_TOKEN_EXPIRATION / JWT_REFRESH_TOKEN_EXPIRATION: str
        Lifetimes as ``"<n><s|m|h|d>"`` (``"15m"``, ``"7d"``).
    JWT_SECRET_KEY: str
        Mirrors the access secret for ``flask-jwt-extended``; the decode-key
        loader picks the real secret per token type.
    EMAIL_VERIFICATION_REQUIRED: bool
        Reject logins of accounts whose email is not verified.
    EMAIL_VERIFICATION_TOKEN_EXPIRATION / PASSWORD_RESET_TOKEN_EXPIRATION: str
        One-time token lifetimes.
    REDIS_URL: str | None
        Revocation cache location. When unset an in-process cache is used.
    SMTP_*: Any
        Outbound mail settings. Without ``SMTP_HOST`` emails are only logged.
    APP_URL: str
        Public frontend URL used in email links.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    ENV_NAME = "base"
    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET", DEFAULT_ACCESS_SECRET)
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", DEFAULT_REFRESH_SECRET)
    JWT_ACCESS_TOKEN_EXPIRATION = os.getenv("JWT_ACCESS_TOKEN_EXPIRATION", "15m")
    JWT_REFRESH_TOKEN_EXPIRATION = os.getenv("JWT_REFRESH_TOKEN_EXPIRATION", "7d")
    JWT_SECRET_KEY = JWT_ACCESS_SECRET
    JWT_ALGORITHM = "HS256"
    JWT_TOKEN_LOCATION = ["headers"]
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")

    # Account lifecycle
    EMAIL_VERIFICATION_REQUIRED = env_bool("EMAIL_VERIFICATION_REQUIRED", True)
    EMAIL_VERIFICATION_TOKEN_EXPIRATION = os.getenv("EMAIL_VERIFICATION_TOKEN_EXPIRATION", "24h")
    PASSWORD_RESET_TOKEN_EXPIRATION = os.getenv("PASSWORD_RESET_TOKEN_EXPIRATION", "1h")

    # Cache
    REDIS_URL = os.getenv("REDIS_URL") or None

    # Email
    APP_URL = os.getenv("APP_URL", "http://localhost:3000")
    SMTP_HOST = os.getenv("SMTP_HOST") or None
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USER = os.getenv("SMTP_USER") or None
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD") or None
    SMTP_USE_TLS = env_bool("SMTP_USE_TLS", True)
    MAIL_FROM = os.getenv("MAIL_FROM") or None

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development."""

    ENV_NAME = "development"
    DEBUG = env_bool("FLASK_DEBUG", True)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Never talks to Redis or SMTP.
    - Uses a cheap password hash so suites stay fast.
    """

    ENV_NAME = "testing"
    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    PROPAGATE_EXCEPTIONS = True
    REDIS_URL = None
    SMTP_HOST = None
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    EMAIL_VERIFICATION_REQUIRED = True
    JWT_ACCESS_SECRET = "test-access-secret-0123456789abcdef"
    JWT_REFRESH_SECRET = "test-refresh-secret-0123456789abcdef"
    JWT_SECRET_KEY = JWT_ACCESS_SECRET


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    :func:`validate_secrets` runs at startup and refuses weak token secrets.
    """

    ENV_NAME = "production"
    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def validate_secrets(config: Mapping[str, Any]) -> None:
    """Refuse to run production with placeholder or weak token secrets.

    :param config: Loaded Flask config.
    :raises RuntimeError: On default, short, or shared access/refresh secrets.
    """
    access = str(config.get("JWT_ACCESS_SECRET") or "")
    refresh = str(config.get("JWT_REFRESH_SECRET") or "")
    problems: list[str] = []
    if access in ("", DEFAULT_ACCESS_SECRET) or refresh in ("", DEFAULT_REFRESH_SECRET):
        problems.append("JWT secrets must be set")
    if len(access) < MIN_SECRET_LENGTH or len(refresh) < MIN_SECRET_LENGTH:
        problems.append(f"JWT secrets must be at least {MIN_SECRET_LENGTH} characters")
    if access and access == refresh:
        problems.append("access and refresh secrets must differ")
    if problems:
        raise RuntimeError("Invalid production configuration: " + "; ".join(problems))
