"""Unit tests for UserRepository."""

from datetime import timedelta

import pytest

from griya_auth.core.clock import as_utc, utcnow
from griya_auth.models import User, UserStatus
from griya_auth.repositories.user import UserRepository
from tests.factories.user import UserFactory


class TestUserRepository:
    """Ensure ``UserRepository`` performs core persistence operations."""

    @pytest.fixture()
    def repo(self, session):
        return UserRepository(session=session)

    def test_lookup_by_email_is_case_insensitive(self, repo):
        u = UserFactory(email="alice@example.com", username="alice")

        fetched = repo.get_by_email("  ALICE@example.com ")
        assert fetched is not None
        assert fetched.id == u.id
        assert repo.get_by_username("alice").id == u.id
        assert repo.get_by_email("missing@example.com") is None

    def test_find_by_identifier_accepts_username_or_email(self, repo):
        u = UserFactory(email="ident@example.com", username="ident")

        assert repo.find_by_identifier("ident").id == u.id
        assert repo.find_by_identifier("Ident@Example.com").id == u.id
        assert repo.find_by_identifier("someone-else") is None

    def test_exists_helpers(self, repo):
        UserFactory(email="bob@example.com", username="bob", phone="+628111")

        assert repo.exists_by_email("BOB@example.com")
        assert repo.exists_by_username("bob")
        assert repo.exists_by_phone("+628111")
        assert not repo.exists_by_email("nonexistent@example.com")
        assert not repo.exists_by_phone("+629999")

    def test_increment_failed_attempts_locks_at_threshold(self, repo, session):
        u = UserFactory(failed_login_attempts=1)
        until = utcnow() + timedelta(minutes=30)

        assert repo.increment_failed_attempts(u.id, threshold=3, lock_until=until) == 2
        session.expire_all()
        assert session.get(User, u.id).locked_until is None

        assert repo.increment_failed_attempts(u.id, threshold=3, lock_until=until) == 3
        session.expire_all()
        assert as_utc(session.get(User, u.id).locked_until) == until

    def test_increment_missing_user(self, repo):
        assert repo.increment_failed_attempts(99999, threshold=3, lock_until=utcnow()) == 0

    def test_reset_login_state_and_last_login(self, repo, session):
        u = UserFactory(failed_login_attempts=4, locked_until=utcnow() + timedelta(minutes=1))
        when = utcnow()

        assert repo.reset_login_state(u.id) is True
        repo.update_last_login(u.id, when)

        session.expire_all()
        fresh = session.get(User, u.id)
        assert fresh.failed_login_attempts == 0
        assert fresh.locked_until is None
        assert as_utc(fresh.last_login_at) == when

    def test_mark_email_verified_activates(self, repo):
        u = UserFactory(status=UserStatus.PENDING_VERIFICATION, email_verified_at=None)
        when = utcnow()

        repo.mark_email_verified(u, when)

        assert u.status == UserStatus.ACTIVE
        assert u.is_email_verified

    def test_set_password_hashes(self, repo):
        u = UserFactory()
        old_hash = u.password_hash

        repo.set_password(u, "newpass123")

        assert u.password_hash != old_hash
        assert u.password_hash != "newpass123"
        assert u.verify_password("newpass123")
