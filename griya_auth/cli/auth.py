"""Flask CLI commands for scheduled auth maintenance."""

from __future__ import annotations

import logging
from datetime import timedelta

import click
from flask import current_app
from flask.cli import with_appcontext

from griya_auth.core.clock import utcnow
from griya_auth.core.extensions import get_notifier, get_token_codec
from griya_auth.services._shared.errors import UserNotFound
from griya_auth.services.auth.dto import AuthSettings
from griya_auth.services.auth.service import AuthService
from griya_auth.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

LOGGER = logging.getLogger(__name__)

DEFAULT_ROLES: tuple[tuple[str, str], ...] = (
    ("USER", "Self-registered account"),
    ("ADMIN", "Administrator"),
    ("DEVELOPER", "Developer account"),
)


def _service() -> AuthService:
    return AuthService(
        token_codec=get_token_codec(),
        notifier=get_notifier(),
        settings=AuthSettings.from_config(current_app.config),
    )


@click.group("auth")
def auth_cli() -> None:
    """Authentication maintenance commands."""


@auth_cli.command("cleanup-sessions")
@click.option(
    "--days",
    type=click.IntRange(min=1),
    default=None,
    help="Inactivity window in days (defaults to AUTH_SESSION_RETENTION_DAYS).",
)
@with_appcontext
def cleanup_sessions(days: int | None) -> None:
    """Delete sessions whose last activity is older than the retention window."""
    retention = timedelta(days=days) if days is not None else None
    removed = _service().cleanup_expired_sessions(utcnow(), retention=retention)
    LOGGER.info("Session cleanup finished", extra={"count": removed})
    click.echo(f"Removed {removed} expired session(s).")


@auth_cli.command("unlock")
@click.argument("user_id", type=int)
@with_appcontext
def unlock(user_id: int) -> None:
    """Clear the failed-login counter and lock of USER_ID."""
    try:
        _service().unlock_account(user_id)
    except UserNotFound as exc:
        raise click.ClickException(f"User {user_id} not found.") from exc
    click.echo(f"User {user_id} unlocked.")


@auth_cli.command("seed-roles")
@with_appcontext
def seed_roles() -> None:
    """Create the default roles when missing (idempotent)."""
    with SQLAlchemyUnitOfWork() as uow:
        created = 0
        for name, description in DEFAULT_ROLES:
            if uow.roles.get_by_name(name) is None:
                uow.roles.get_or_create(name, description)
                created += 1
    click.echo(f"Roles ready ({created} created).")
