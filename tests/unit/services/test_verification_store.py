"""Unit tests for VerificationTokenStore."""

from __future__ import annotations

from datetime import timedelta

import pytest

from griya_auth.core.clock import as_utc, utcnow
from griya_auth.models import TokenPurpose, VerificationToken
from griya_auth.repositories.verification_token import VerificationTokenRepository
from griya_auth.services._shared.errors import TokenAlreadyUsed, TokenExpired, TokenNotFound
from griya_auth.services._shared.ports import sha256_hex
from griya_auth.services.auth.verification_store import VerificationTokenStore
from tests.factories.user import UserFactory
from tests.factories.verification_token import VerificationTokenFactory


@pytest.fixture()
def store(session) -> VerificationTokenStore:
    return VerificationTokenStore(VerificationTokenRepository(session=session))


class TestVerificationTokenStore:
    def test_issue_returns_raw_and_stores_hash(self, store, session):
        user = UserFactory()
        before = utcnow()

        raw = store.issue(user, ttl_minutes=60, purpose=TokenPurpose.PASSWORD_RESET)
        session.commit()

        assert len(raw) == 32
        int(raw, 16)  # hex only
        record = session.query(VerificationToken).one()
        assert record.token_hash == sha256_hex(raw)
        assert record.token_hash != raw
        assert record.user_id == user.id
        assert record.purpose == TokenPurpose.PASSWORD_RESET
        assert before + timedelta(minutes=59) < as_utc(record.expires_at) <= utcnow() + timedelta(minutes=60)

    def test_issue_twice_gives_distinct_tokens(self, store):
        user = UserFactory()

        purpose = TokenPurpose.EMAIL_VERIFICATION

        assert store.issue(user, 5, purpose) != store.issue(user, 5, purpose)

    def test_redeem_once(self, store):
        VerificationTokenFactory(raw_token="abc")

        user, record = store.redeem("abc")
        assert record.used_at is not None
        assert user.id == record.user_id

        with pytest.raises(TokenAlreadyUsed):
            store.redeem("abc")

    def test_redeem_expired(self, store):
        VerificationTokenFactory(raw_token="late", expires_at=utcnow() - timedelta(seconds=1))

        with pytest.raises(TokenExpired):
            store.redeem("late")

    def test_redeem_unknown(self, store):
        with pytest.raises(TokenNotFound):
            store.redeem("nope")

    def test_inspect_does_not_consume(self, store, session):
        VerificationTokenFactory(raw_token="peek")

        assert store.inspect("peek").used_at is None
        assert store.inspect("peek").used_at is None

    def test_redeem_loses_race(self, store, session):
        """A concurrent redeem that already set used_at makes ours fail."""
        token = VerificationTokenFactory(raw_token="race")
        repo = VerificationTokenRepository(session=session)

        record = store.inspect("race")
        assert repo.mark_used(token.id, when=utcnow()) is True
        assert repo.mark_used(record.id, when=utcnow()) is False

    def test_purpose_mismatch_reads_as_unknown(self, store, session):
        token = VerificationTokenFactory(raw_token="signup", purpose=TokenPurpose.EMAIL_VERIFICATION)
        token_id = token.id

        with pytest.raises(TokenNotFound):
            store.redeem("signup", TokenPurpose.PASSWORD_RESET)

        session.expire_all()
        assert session.get(VerificationToken, token_id).used_at is None
        _user, record = store.redeem("signup", TokenPurpose.EMAIL_VERIFICATION)
        assert record.id == token_id
