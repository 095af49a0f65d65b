import pytest
from sqlalchemy import text

from griya_auth.models import User
from griya_auth.uow import SQLAlchemyReadOnlyUnitOfWork as ROuow
from tests.factories.user import UserFactory


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, session):
        """
        Ensure that attempting to flush ORM changes inside the RO UoW raises.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            user = UserFactory.build(password_hash="x")  # not persisted
            uow.session.add(user)
            uow.session.flush()

    def test_blocks_core_dml(self, session):
        """
        Ensure that raw SQL DML is blocked inside the RO UoW.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="SQL statement blocked"):
            uow.session.execute(
                text("UPDATE users SET failed_login_attempts = 0 WHERE id = :id"), {"id": 1}
            )

    def test_allows_reads(self, session):
        user = UserFactory()
        user_id = user.id

        with ROuow() as uow:
            assert uow.users.get(user_id) is not None
            assert uow.session.query(User).count() >= 1

    def test_disallows_commit(self, session):
        """
        RO UoW must reject commit() by design.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_mutation_does_not_persist(self, session):
        user = UserFactory(email="keep@example.com")
        user_id = user.id

        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            u = uow.users.get(user_id)
            u.email = "mutated-in-ro@example.com"
            uow.session.flush()

        session.expire_all()
        assert session.get(User, user_id).email == "keep@example.com"
