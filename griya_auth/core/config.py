"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Placeholder secret; production refuses to boot with it
INSECURE_JWT_SECRET: Final[str] = "CHANGE_ME_JWT"

# Loads .env in development (no-op when the file is missing)
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


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing.
    JWT_SECRET_KEY: str
        Key used to sign access and refresh tokens. The same key is read by
        ``flask-jwt-extended`` when guarding routes.
    JWT_ALGORITHM: str
        HMAC algorithm for token signatures (``HS256`` by default).
    JWT_ACCESS_TOKEN_EXPIRES: timedelta
        Access token lifetime (minutes-scale).
    JWT_REFRESH_TOKEN_EXPIRES: timedelta
        Refresh token lifetime (days-scale).
    JWT_ISSUER: str | None
        Optional ``iss`` claim written into and required from every token.
    AUTH_LOCKOUT_THRESHOLD: int
        Failed logins after which the account is locked.
    AUTH_LOCKOUT_MINUTES: int
        Length of the lock window.
    AUTH_EMAIL_VERIFICATION_TTL_MINUTES: int
        Lifetime of email-verification tokens.
    AUTH_PASSWORD_RESET_TTL_MINUTES: int
        Lifetime of password-reset tokens.
    AUTH_SESSION_RETENTION_DAYS: int
        Inactivity window after which sessions are deleted by cleanup.
    AUTH_DEFAULT_ROLE: str
        Role assigned to self-registered users.
    MAIL_SMTP_HOST: str | None
        SMTP relay; when unset, outbound mail is logged instead of sent.
    APP_PUBLIC_URL: str
        Base URL used to build links embedded in emails.
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

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", INSECURE_JWT_SECRET)
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=env_int("JWT_ACCESS_TOKEN_MINUTES", 15))
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=env_int("JWT_REFRESH_TOKEN_DAYS", 7))
    JWT_ISSUER = os.getenv("JWT_ISSUER") or None
    # flask-jwt-extended reads these when guarding routes
    JWT_ENCODE_ISSUER = JWT_ISSUER
    JWT_DECODE_ISSUER = JWT_ISSUER
    JWT_TOKEN_LOCATION = ["headers"]

    # Authentication policy
    AUTH_LOCKOUT_THRESHOLD = env_int("AUTH_LOCKOUT_THRESHOLD", 3)
    AUTH_LOCKOUT_MINUTES = env_int("AUTH_LOCKOUT_MINUTES", 30)
    AUTH_EMAIL_VERIFICATION_TTL_MINUTES = env_int("AUTH_EMAIL_VERIFICATION_TTL_MINUTES", 1440)
    AUTH_PASSWORD_RESET_TTL_MINUTES = env_int("AUTH_PASSWORD_RESET_TTL_MINUTES", 15)
    AUTH_SESSION_RETENTION_DAYS = env_int("AUTH_SESSION_RETENTION_DAYS", 30)
    AUTH_DEFAULT_ROLE = os.getenv("AUTH_DEFAULT_ROLE", "USER")

    # Outbound mail
    MAIL_SMTP_HOST = os.getenv("MAIL_SMTP_HOST") or None
    MAIL_SMTP_PORT = env_int("MAIL_SMTP_PORT", 587)
    MAIL_SMTP_USER = os.getenv("MAIL_SMTP_USER") or None
    MAIL_SMTP_PASSWORD = os.getenv("MAIL_SMTP_PASSWORD") or None
    MAIL_USE_TLS = env_bool("MAIL_USE_TLS", True)
    MAIL_FROM = os.getenv("MAIL_FROM", "no-reply@griya.local")
    APP_PUBLIC_URL = os.getenv("APP_PUBLIC_URL", "http://localhost:5173")

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and honors ``SQLALCHEMY_ECHO`` for verbose
    SQL logging when requested.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Never talks to an SMTP relay.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    JWT_SECRET_KEY = "testing-secret-key-with-enough-entropy"
    MAIL_SMTP_HOST = None
    PROPAGATE_EXCEPTIONS = True
    USE_PROXYFIX = False


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled. :func:`validate_config` rejects the
    placeholder JWT secret for this environment.
    """

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

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def validate_config(config: Mapping[str, object]) -> None:
    """Fail fast on settings that would make the auth layer unsafe.

    :param config: Loaded Flask configuration mapping.
    :raises RuntimeError: When production runs with the placeholder secret or
        when lockout settings are not positive.
    """
    is_prod = not config.get("DEBUG") and not config.get("TESTING")
    if is_prod and config.get("JWT_SECRET_KEY") in (None, "", INSECURE_JWT_SECRET):
        raise RuntimeError("JWT_SECRET_KEY must be set to a non-default value in production.")
    if int(config.get("AUTH_LOCKOUT_THRESHOLD", 0)) < 1:  # type: ignore[call-overload]
        raise RuntimeError("AUTH_LOCKOUT_THRESHOLD must be >= 1.")
    if int(config.get("AUTH_LOCKOUT_MINUTES", 0)) < 1:  # type: ignore[call-overload]
        raise RuntimeError("AUTH_LOCKOUT_MINUTES must be >= 1.")
