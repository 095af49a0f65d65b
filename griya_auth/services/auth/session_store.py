"""Refresh-token-backed session lifecycle."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import datetime

from griya_auth.core.clock import utcnow
from griya_auth.models.session import SessionStatus, UserSession
from griya_auth.repositories.session import UserSessionRepository
from griya_auth.services._shared.errors import RefreshTokenInvalid
from griya_auth.services._shared.ports import sha256_hex

log = logging.getLogger(__name__)


class SessionStore:
    """
    Create, look up, rotate, revoke and purge sessions.

    Raw refresh tokens never reach storage: every lookup and write goes
    through ``hasher`` first.

    :param sessions: Repository sharing the caller's unit of work.
    :param hasher: One-way hash applied to raw refresh tokens.
    """

    def __init__(
        self,
        sessions: UserSessionRepository,
        *,
        hasher: Callable[[str], str] = sha256_hex,
    ) -> None:
        self.sessions = sessions
        self.hasher = hasher

    def create(
        self,
        user_id: int,
        raw_refresh_token: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> UserSession:
        now = utcnow()
        session = UserSession(
            user_id=user_id,
            refresh_token_hash=self.hasher(raw_refresh_token),
            ip_address=ip_address,
            user_agent=user_agent,
            payload=json.dumps({"loginTime": now.isoformat()}),
            status=SessionStatus.ACTIVE,
            last_activity=now,
        )
        self.sessions.add(session)
        log.info("Session created", extra={"user_id": user_id, "session_id": session.id})
        return session

    def find_active_by_refresh_token(self, raw_refresh_token: str) -> UserSession | None:
        return self.sessions.find_active_by_hash(self.hasher(raw_refresh_token))

    def rotate(
        self,
        session: UserSession,
        new_raw_refresh_token: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> UserSession:
        """Swap the session's refresh-token hash in one conditional update.

        :raises RefreshTokenInvalid: When another request rotated or revoked
            the session first.
        """
        swapped = self.sessions.rotate_hash(
            session.id,
            old_hash=session.refresh_token_hash,
            new_hash=self.hasher(new_raw_refresh_token),
            when=utcnow(),
            ip_address=ip_address,
            user_agent=user_agent,
        )
        if not swapped:
            log.warning(
                "Session rotation lost a race",
                extra={"user_id": session.user_id, "session_id": session.id},
            )
            raise RefreshTokenInvalid()
        log.info(
            "Session rotated", extra={"user_id": session.user_id, "session_id": session.id}
        )
        return self.sessions.refresh(session)

    def revoke(self, session: UserSession) -> bool:
        revoked = self.sessions.revoke(session.id, when=utcnow())
        if revoked:
            log.info(
                "Session revoked", extra={"user_id": session.user_id, "session_id": session.id}
            )
        return revoked

    def revoke_all(self, user_id: int) -> int:
        count = self.sessions.revoke_all_for_user(user_id, when=utcnow())
        log.info("Revoked all sessions", extra={"user_id": user_id, "count": count})
        return count

    def cleanup_expired(self, cutoff: datetime) -> int:
        """Delete sessions whose last activity precedes ``cutoff``."""
        count = self.sessions.delete_inactive_before(cutoff)
        log.info("Expired sessions removed", extra={"count": count})
        return count

    def list_active(self, user_id: int) -> list[UserSession]:
        return self.sessions.list_active_for_user(user_id)
