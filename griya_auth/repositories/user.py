"""User repository: lookups and atomic login-state updates."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import case, or_, select, update

from griya_auth.models.user import User, UserStatus
from griya_auth.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Lockout counters are mutated with single ``UPDATE`` statements so two
    concurrent failed logins can never both read ``n`` and write ``n + 1``.
    It NEVER issues tokens or decides lockout policy.
    """

    model = User

    def _filterable_fields(self):
        return {
            "username": User.username,
            "email": User.email,
            "phone": User.phone,
            "status": User.status,
        }

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == email.lower().strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def get_by_username(self, username: str) -> User | None:
        stmt = select(User).where(User.username == username.strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def find_by_identifier(self, identifier: str) -> User | None:
        """Fetch a user whose username or email equals ``identifier``.

        :param identifier: Username or email submitted at login.
        :type identifier: str
        :returns: Matching user or ``None``.
        :rtype: User | None
        """
        value = identifier.strip()
        stmt = select(User).where(
            or_(User.username == value, User.email == value.lower())
        )
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_username(self, username: str) -> bool:
        return self.exists(username=username.strip())

    def exists_by_email(self, email: str) -> bool:
        return self.exists(email=email.lower().strip())

    def exists_by_phone(self, phone: str) -> bool:
        return self.exists(phone=phone.strip())

    # ---------------------------- Lockout state ----------------------------

    def increment_failed_attempts(
        self, user_id: int, *, threshold: int, lock_until: datetime
    ) -> int:
        """Atomically add one failed attempt, locking at ``threshold``.

        Both the counter and ``locked_until`` are set by the same statement,
        evaluated against the row's current values.

        :param user_id: Target user.
        :param threshold: Count at which the account becomes locked.
        :param lock_until: Value written to ``locked_until`` when the new
            count reaches ``threshold``.
        :returns: The counter value after the increment (``0`` when the user
            does not exist).
        :rtype: int
        """
        new_count = User.failed_login_attempts + 1
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(
                failed_login_attempts=new_count,
                locked_until=case(
                    (new_count >= threshold, lock_until),
                    else_=User.locked_until,
                ),
            )
            .execution_options(synchronize_session="fetch")
        )
        result = self.session.execute(stmt)
        if result.rowcount == 0:
            return 0
        count = self.session.execute(
            select(User.failed_login_attempts).where(User.id == user_id)
        ).scalar_one()
        return int(count)

    def reset_login_state(self, user_id: int) -> bool:
        """Zero the failed-attempt counter and clear ``locked_until``.

        :returns: ``True`` when a row was updated.
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(failed_login_attempts=0, locked_until=None)
            .execution_options(synchronize_session="fetch")
        )
        return self.session.execute(stmt).rowcount == 1

    def update_last_login(self, user_id: int, when: datetime) -> None:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(last_login_at=when)
            .execution_options(synchronize_session="fetch")
        )
        self.session.execute(stmt)

    # ---------------------------- Mutations ----------------------------

    def mark_email_verified(self, user: User, when: datetime) -> User:
        """Set ``email_verified_at`` and activate the account."""
        user.email_verified_at = when
        user.status = UserStatus.ACTIVE
        self.flush()
        return user

    def set_password(self, user: User, raw_password: str) -> User:
        """Hash and assign a new password (the model setter hashes)."""
        user.password = raw_password
        self.flush()
        return user
