"""
Unit tests for SQLAlchemyUnitOfWork (writer), using factories.
"""

from __future__ import annotations

import pytest

from griya_auth.models import User
from griya_auth.uow import SQLAlchemyUnitOfWork
from tests.factories.user import RoleFactory, UserFactory


class TestSQLAlchemyUnitOfWorkWriter:
    def test_writer_uow_commits_on_success(self, app, db, session):
        """
        GIVEN a writer UoW
        WHEN we create a user via repo inside the context and leave without exception
        THEN the transaction is committed and the row is visible afterwards.
        """
        role = RoleFactory()
        initial = db.session.query(User).count()

        with SQLAlchemyUnitOfWork() as uow:
            u = UserFactory.build(role=role, password_hash="x")
            uow.users.add(u)

        after = db.session.query(User).count()
        assert after == initial + 1

    def test_writer_uow_rolls_back_on_exception(self, app, db, session):
        """
        GIVEN a writer UoW
        WHEN an exception is raised inside the context
        THEN the transaction is rolled back and no rows are persisted.
        """
        role = RoleFactory()
        initial = db.session.query(User).count()

        with pytest.raises(RuntimeError), SQLAlchemyUnitOfWork() as uow:
            u = UserFactory.build(role=role, password_hash="x")
            uow.users.add(u)
            raise RuntimeError("boom")

        after = db.session.query(User).count()
        assert after == initial

    def test_writer_exposes_auth_repositories(self, session):
        with SQLAlchemyUnitOfWork() as uow:
            assert uow.users.session is uow.sessions.session
            assert uow.verification_tokens.session is uow.roles.session
