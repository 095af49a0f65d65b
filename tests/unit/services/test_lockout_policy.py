"""Unit tests for LockoutPolicy."""

from __future__ import annotations

import logging
from datetime import timedelta

import pytest

from griya_auth.core.clock import as_utc, utcnow
from griya_auth.models import User
from griya_auth.repositories.user import UserRepository
from griya_auth.services.auth.lockout import LockoutPolicy
from tests.factories.user import UserFactory


@pytest.fixture()
def policy(session) -> LockoutPolicy:
    return LockoutPolicy(UserRepository(session=session), threshold=3, duration=timedelta(minutes=30))


def _fresh(session, user_id) -> User:
    session.expire_all()
    return session.get(User, user_id)


class TestLockoutPolicy:
    def test_threshold_must_be_positive(self, session):
        with pytest.raises(ValueError):
            LockoutPolicy(UserRepository(session=session), threshold=0)

    def test_failures_below_threshold_do_not_lock(self, policy, session):
        user = UserFactory()

        assert policy.on_failure(user.id) == 1
        assert policy.on_failure(user.id) == 2

        fresh = _fresh(session, user.id)
        assert fresh.failed_login_attempts == 2
        assert fresh.locked_until is None
        assert policy.is_locked(fresh) is False

    def test_reaching_threshold_locks_for_duration(self, policy, session, caplog):
        user = UserFactory(failed_login_attempts=2)
        now = utcnow()

        with caplog.at_level(logging.WARNING, logger="griya_auth.services.auth.lockout"):
            assert policy.on_failure(user.id, now=now) == 3

        fresh = _fresh(session, user.id)
        assert as_utc(fresh.locked_until) == now + timedelta(minutes=30)
        assert policy.is_locked(fresh)
        assert policy.is_locked(fresh, now=now + timedelta(minutes=31)) is False
        assert any("locked" in r.getMessage() for r in caplog.records)

    def test_on_success_clears_state(self, policy, session):
        user = UserFactory(failed_login_attempts=3, locked_until=utcnow() + timedelta(minutes=10))

        policy.on_success(user.id)

        fresh = _fresh(session, user.id)
        assert fresh.failed_login_attempts == 0
        assert fresh.locked_until is None

    def test_unlock_reports_missing_user(self, policy, session):
        user = UserFactory(failed_login_attempts=5, locked_until=utcnow() + timedelta(minutes=10))

        assert policy.unlock(user.id) is True
        assert policy.unlock(987654) is False
        assert _fresh(session, user.id).is_locked() is False

    def test_on_failure_for_missing_user_returns_zero(self, policy):
        assert policy.on_failure(123456) == 0
