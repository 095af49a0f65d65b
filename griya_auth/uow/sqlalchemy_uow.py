"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

from contextlib import suppress

from flask import current_app
from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from griya_auth.core.extensions import db
from griya_auth.repositories import (
    RoleRepository,
    UserRepository,
    UserSessionRepository,
    VerificationTokenRepository,
)
from griya_auth.uow.base import UnitOfWork


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)
        self.roles = RoleRepository(session=self.session)
        self.sessions = UserSessionRepository(session=self.session)
        self.verification_tokens = VerificationTokenRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    SQLAlchemy-backed UoW using the Flask-scoped session.

    Commits when the block exits normally and rolls back when it raises, so a
    use-case either persists every mutation or none of them.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # The session begins lazily on first use.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read scope for profile lookups and session listings.

    Any ORM flush or DML statement issued inside the block raises
    ``RuntimeError``. When the scope opens its own transaction it also sends
    ``SET TRANSACTION`` directives on PostgreSQL and MySQL/MariaDB and rolls
    the transaction back on exit; when a transaction is already running it
    attaches to it and only the guards apply.

    :param isolation_level: Isolation hint such as ``"READ COMMITTED"``;
        ``None`` keeps the connection default.
    :param enforce_db_readonly: Send ``SET TRANSACTION READ ONLY`` where supported.
    """

    WRITE_VERBS = frozenset(
        {"insert", "update", "delete", "merge", "alter", "drop", "truncate", "create", "replace"}
    )
    DIRECTIVE_DIALECTS = frozenset({"postgresql", "mysql", "mariadb"})

    def __init__(
        self,
        *,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=db.session)
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly
        self._owned: SessionTransaction | None = None
        self._guarded: Connection | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        try:
            self._owned = self.session.begin()
        except InvalidRequestError:
            # autobegun or opened by an outer scope
            self._owned = None

        conn = self.session.connection()
        event.listen(self.session, "before_flush", self._guard_flush)
        event.listen(conn, "before_cursor_execute", self._guard_statement)
        self._guarded = conn

        if self._owned is not None and conn.dialect.name in self.DIRECTIVE_DIALECTS:
            self._apply_directives()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owned is not None:
                with suppress(SQLAlchemyError):
                    self._owned.rollback()
        finally:
            self._owned = None
            self._drop_guards()

    def commit(self) -> None:
        """:raises RuntimeError: Always; this scope never persists anything."""
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    # ------------------------------ Guards ---------------------------------

    def _apply_directives(self) -> None:
        try:
            if self.isolation_level:
                level = self.isolation_level.upper().strip()
                self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {level}"))
            if self.enforce_db_readonly:
                self.session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            current_app.logger.warning("SET TRANSACTION rejected (%s); guards only.", exc)

    def _guard_flush(self, session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError("Read-only UnitOfWork: ORM flush blocked.")

    def _guard_statement(self, conn, cursor, statement, parameters, context, executemany) -> None:
        verb = statement.lstrip().split(None, 1)[0].lower() if statement else ""
        if verb in self.WRITE_VERBS:
            raise RuntimeError(f"Read-only UnitOfWork: SQL statement blocked: {verb.upper()}")

    def _drop_guards(self) -> None:
        with suppress(InvalidRequestError):
            event.remove(self.session, "before_flush", self._guard_flush)
        if self._guarded is not None:
            with suppress(InvalidRequestError):
                event.remove(self._guarded, "before_cursor_execute", self._guard_statement)
            self._guarded = None
