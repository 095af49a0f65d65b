"""User session repository: hash lookups and compare-and-set transitions."""

from __future__ import annotations

from datetime import datetime
from typing import Any, cast

from sqlalchemy import delete, select, update

from griya_auth.models.session import SessionStatus, UserSession
from griya_auth.repositories.base import BaseRepository


class UserSessionRepository(BaseRepository[UserSession]):
    """Persistence-only repository for :class:`UserSession`.

    Rotation and revocation are conditional ``UPDATE`` statements whose
    ``WHERE`` clause encodes the expected current state; the returned row
    count tells the caller whether it won.
    """

    model = UserSession

    def _sortable_fields(self):
        return {
            "last_activity": UserSession.last_activity,
            "created_at": UserSession.created_at,
        }

    def _filterable_fields(self):
        return {
            "user_id": UserSession.user_id,
            "status": UserSession.status,
        }

    def find_active_by_hash(self, token_hash: str) -> UserSession | None:
        """Return the ``ACTIVE`` session whose refresh-token hash matches."""
        stmt = select(UserSession).where(
            UserSession.refresh_token_hash == token_hash,
            UserSession.status == SessionStatus.ACTIVE,
        )
        return cast(UserSession | None, self.session.execute(stmt).scalars().first())

    def list_active_for_user(self, user_id: int) -> list[UserSession]:
        return self.list(
            filters={"user_id": user_id, "status": SessionStatus.ACTIVE},
            sort=["-last_activity"],
        )

    def rotate_hash(
        self,
        session_id: str,
        *,
        old_hash: str,
        new_hash: str,
        when: datetime,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> bool:
        """Swap ``old_hash`` for ``new_hash`` on an active session.

        :returns: ``True`` only if this call performed the swap; ``False``
            when the session was already rotated or revoked.
        """
        values: dict[str, Any] = {"refresh_token_hash": new_hash, "last_activity": when}
        if ip_address is not None:
            values["ip_address"] = ip_address
        if user_agent is not None:
            values["user_agent"] = user_agent
        stmt = (
            update(UserSession)
            .where(
                UserSession.id == session_id,
                UserSession.refresh_token_hash == old_hash,
                UserSession.status == SessionStatus.ACTIVE,
            )
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        return self.session.execute(stmt).rowcount == 1

    def revoke(self, session_id: str, *, when: datetime) -> bool:
        stmt = (
            update(UserSession)
            .where(UserSession.id == session_id, UserSession.status == SessionStatus.ACTIVE)
            .values(status=SessionStatus.REVOKED, last_activity=when)
            .execution_options(synchronize_session="fetch")
        )
        return self.session.execute(stmt).rowcount == 1

    def revoke_all_for_user(self, user_id: int, *, when: datetime) -> int:
        stmt = (
            update(UserSession)
            .where(UserSession.user_id == user_id, UserSession.status == SessionStatus.ACTIVE)
            .values(status=SessionStatus.REVOKED, last_activity=when)
            .execution_options(synchronize_session="fetch")
        )
        return int(self.session.execute(stmt).rowcount)

    def delete_inactive_before(self, cutoff: datetime) -> int:
        """Delete every session (any status) whose last activity precedes ``cutoff``."""
        stmt = (
            delete(UserSession)
            .where(UserSession.last_activity < cutoff)
            .execution_options(synchronize_session="fetch")
        )
        return int(self.session.execute(stmt).rowcount)
