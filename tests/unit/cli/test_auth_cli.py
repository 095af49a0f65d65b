"""Tests for the ``flask auth`` maintenance commands."""

from __future__ import annotations

from datetime import timedelta

from sqlalchemy import select

from griya_auth.core.clock import utcnow
from griya_auth.models import Role, User, UserSession
from tests.factories.session import UserSessionFactory
from tests.factories.user import UserFactory


def _invoke(app, *args: str):
    return app.test_cli_runner().invoke(args=["auth", *args])


def test_cleanup_sessions_uses_days_option(app, session):
    stale = UserSessionFactory(last_activity=utcnow() - timedelta(days=3))
    fresh = UserSessionFactory(last_activity=utcnow())
    stale_id, fresh_id = stale.id, fresh.id

    result = _invoke(app, "cleanup-sessions", "--days", "2")

    assert result.exit_code == 0, result.output
    assert "Removed 1 expired session(s)." in result.output
    session.expire_all()
    assert session.get(UserSession, stale_id) is None
    assert session.get(UserSession, fresh_id) is not None


def test_cleanup_sessions_rejects_non_positive_days(app):
    result = _invoke(app, "cleanup-sessions", "--days", "0")

    assert result.exit_code != 0


def test_unlock_clears_lockout(app, session):
    user = UserFactory(failed_login_attempts=3, locked_until=utcnow() + timedelta(minutes=30))
    user_id = user.id

    result = _invoke(app, "unlock", str(user_id))

    assert result.exit_code == 0, result.output
    assert f"User {user_id} unlocked." in result.output
    session.expire_all()
    unlocked = session.get(User, user_id)
    assert unlocked.failed_login_attempts == 0
    assert unlocked.locked_until is None


def test_unlock_unknown_user_fails(app):
    result = _invoke(app, "unlock", "987654")

    assert result.exit_code == 1
    assert "User 987654 not found." in result.output


def test_seed_roles_is_idempotent(app, session):
    first = _invoke(app, "seed-roles")
    second = _invoke(app, "seed-roles")

    assert "Roles ready (3 created)." in first.output
    assert "Roles ready (0 created)." in second.output
    names = set(session.execute(select(Role.name)).scalars())
    assert {"USER", "ADMIN", "DEVELOPER"} <= names
