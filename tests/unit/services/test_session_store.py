"""Unit tests for SessionStore."""

from __future__ import annotations

from datetime import timedelta
from types import SimpleNamespace

import pytest

from griya_auth.core.clock import utcnow
from griya_auth.models import SessionStatus, UserSession
from griya_auth.repositories.session import UserSessionRepository
from griya_auth.services._shared.errors import RefreshTokenInvalid
from griya_auth.services._shared.ports import sha256_hex
from griya_auth.services.auth.session_store import SessionStore
from tests.factories.session import UserSessionFactory
from tests.factories.user import UserFactory


@pytest.fixture()
def store(session) -> SessionStore:
    return SessionStore(UserSessionRepository(session=session))


class TestSessionStore:
    def test_create_stores_hash_not_raw_token(self, store, session):
        user = UserFactory()

        created = store.create(user.id, "raw-refresh", ip_address="127.0.0.1", user_agent="ua")
        session.commit()

        assert created.refresh_token_hash == sha256_hex("raw-refresh")
        assert created.status == SessionStatus.ACTIVE
        assert created.metadata_dict["loginTime"]
        assert store.find_active_by_refresh_token("raw-refresh").id == created.id

    def test_find_ignores_revoked(self, store):
        UserSessionFactory(raw_token="dead", status=SessionStatus.REVOKED)

        assert store.find_active_by_refresh_token("dead") is None
        assert store.find_active_by_refresh_token("never-issued") is None

    def test_rotate_swaps_hash(self, store, session):
        current = UserSessionFactory(raw_token="r1", ip_address="1.1.1.1")

        rotated = store.rotate(current, "r2", ip_address="9.9.9.9")

        assert rotated.refresh_token_hash == sha256_hex("r2")
        assert rotated.ip_address == "9.9.9.9"
        assert store.find_active_by_refresh_token("r1") is None
        assert store.find_active_by_refresh_token("r2").id == current.id

    def test_rotate_loses_race_against_earlier_rotation(self, store, session):
        """Two refreshes read the same row; only the first swap wins."""
        current = UserSessionFactory(raw_token="r1")
        stale = SimpleNamespace(
            id=current.id, user_id=current.user_id, refresh_token_hash=current.refresh_token_hash
        )
        store.rotate(current, "r2")
        session.commit()

        with pytest.raises(RefreshTokenInvalid):
            store.rotate(stale, "r3")

        assert store.find_active_by_refresh_token("r2") is not None
        assert store.find_active_by_refresh_token("r3") is None

    def test_rotate_revoked_session_fails(self, store):
        revoked = UserSessionFactory(raw_token="r1", status=SessionStatus.REVOKED)

        with pytest.raises(RefreshTokenInvalid):
            store.rotate(revoked, "r2")

    def test_revoke_is_terminal(self, store, session):
        current = UserSessionFactory(raw_token="r1")

        assert store.revoke(current) is True
        assert store.revoke(current) is False
        session.expire_all()
        assert session.get(UserSession, current.id).status == SessionStatus.REVOKED

    def test_revoke_all_only_touches_user_sessions(self, store, session):
        user = UserFactory()
        UserSessionFactory(user=user)
        UserSessionFactory(user=user)
        UserSessionFactory(user=user, status=SessionStatus.REVOKED)
        other = UserSessionFactory()

        assert store.revoke_all(user.id) == 2
        assert store.list_active(user.id) == []
        session.expire_all()
        assert session.get(UserSession, other.id).is_active

    def test_cleanup_is_idempotent(self, store):
        cutoff = utcnow() - timedelta(days=30)
        UserSessionFactory(last_activity=cutoff - timedelta(seconds=1))
        UserSessionFactory(last_activity=cutoff + timedelta(hours=1))

        assert store.cleanup_expired(cutoff) == 1
        assert store.cleanup_expired(cutoff) == 0
