"""Account lockout policy over the user's failed-attempt counter."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from griya_auth.core.clock import utcnow
from griya_auth.models.user import User
from griya_auth.repositories.user import UserRepository

log = logging.getLogger(__name__)


class LockoutPolicy:
    """
    Decide and record lockout state for a user.

    The policy is bound to a :class:`UserRepository` of the current unit of
    work; counter changes go through the repository's single-statement
    updates, so they are atomic per user and durable only when the unit of
    work commits.

    :param users: Repository sharing the caller's session.
    :param threshold: Consecutive failures that lock the account.
    :param duration: Length of the lock window.
    """

    def __init__(
        self,
        users: UserRepository,
        *,
        threshold: int = 3,
        duration: timedelta = timedelta(minutes=30),
    ) -> None:
        if threshold < 1:
            raise ValueError("threshold must be >= 1")
        self.users = users
        self.threshold = threshold
        self.duration = duration

    def is_locked(self, user: User, now: datetime | None = None) -> bool:
        """Return ``True`` iff ``locked_until`` is set and still in the future."""
        return user.is_locked(now)

    def on_failure(self, user_id: int, now: datetime | None = None) -> int:
        """Record one failed attempt; lock when the threshold is reached.

        :returns: The failed-attempt count after this failure.
        """
        now = now or utcnow()
        count = self.users.increment_failed_attempts(
            user_id, threshold=self.threshold, lock_until=now + self.duration
        )
        if count >= self.threshold:
            log.warning(
                "Account locked after %s failed attempts",
                count,
                extra={"user_id": user_id, "count": count},
            )
        return count

    def on_success(self, user_id: int) -> None:
        """Reset the counter and clear any lock after a successful login."""
        self.users.reset_login_state(user_id)

    def unlock(self, user_id: int) -> bool:
        """Administrative unlock.

        :returns: ``True`` when the user exists.
        """
        found = self.users.reset_login_state(user_id)
        if found:
            log.info("Account unlocked", extra={"user_id": user_id})
        return found
