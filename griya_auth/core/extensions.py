"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

from typing import cast

from flask import Flask, current_app
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe; hold no per-app state until init_app)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()

TOKEN_CODEC_KEY = "token_codec"
NOTIFIER_KEY = "notifier"


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, migrations, JWT guards and auth adapters.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`griya_auth.models` package to ensure SQLAlchemy metadata is ready
        for migrations.

    Notes
    -----
    The token codec is built once from an immutable :class:`TokenSettings`
    snapshot of the app config and stored in ``app.extensions``; request
    handlers receive it from there instead of reading module globals.
    """
    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from griya_auth import models as _models  # noqa: F401

    migrate.init_app(app, db)
    jwt.init_app(app)

    from griya_auth.infra.jwt.jwt_token_codec import JWTTokenCodec
    from griya_auth.infra.mail.smtp_notifier import SMTPNotifier
    from griya_auth.services.auth.dto import TokenSettings

    app.extensions[TOKEN_CODEC_KEY] = JWTTokenCodec(TokenSettings.from_config(app.config))
    app.extensions.setdefault(NOTIFIER_KEY, SMTPNotifier.from_config(app.config))


def get_token_codec():
    """Return the token codec bound to the current application."""
    from griya_auth.services._shared.ports import TokenCodec

    codec = current_app.extensions.get(TOKEN_CODEC_KEY)
    if codec is None:
        raise RuntimeError("Token codec is not initialized. Call init_app() first.")
    return cast(TokenCodec, codec)


def get_notifier():
    """Return the notifier bound to the current application."""
    from griya_auth.services._shared.ports import Notifier

    notifier = current_app.extensions.get(NOTIFIER_KEY)
    if notifier is None:
        raise RuntimeError("Notifier is not initialized. Call init_app() first.")
    return cast(Notifier, notifier)
