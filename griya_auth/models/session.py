"""Refresh-token-backed login sessions."""

from __future__ import annotations

import json
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from griya_auth.core.clock import utcnow
from griya_auth.core.extensions import db

from .base import CreatedAtMixin, ReprMixin

if TYPE_CHECKING:
    from .user import User


class SessionStatus(str, Enum):
    """Session lifecycle status; ``REVOKED`` is terminal."""

    ACTIVE = "ACTIVE"
    REVOKED = "REVOKED"


def _session_id() -> str:
    return uuid4().hex


class UserSession(ReprMixin, CreatedAtMixin, db.Model):
    """
    Server-side record of an issued refresh token.

    Only the SHA-256 hash of the refresh token is stored. Rotation swaps the
    hash in place, so a hash maps to at most one ``ACTIVE`` row and a rotated
    or revoked hash never matches again.
    """

    __tablename__ = "user_sessions"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_session_id)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    refresh_token_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(512), nullable=True)
    payload: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[SessionStatus] = mapped_column(
        SAEnum(SessionStatus, name="session_status", native_enum=True, create_constraint=True),
        nullable=False,
        default=SessionStatus.ACTIVE,
    )
    last_activity: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    user: Mapped[User] = relationship("User", back_populates="sessions")

    __table_args__ = (
        UniqueConstraint("refresh_token_hash", name="uq_user_sessions_refresh_token_hash"),
        Index("ix_user_sessions_last_activity", "last_activity"),
    )

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    @property
    def metadata_dict(self) -> dict[str, Any]:
        """Decoded ``payload`` (empty when unset or unparsable)."""
        if not self.payload:
            return {}
        try:
            data = json.loads(self.payload)
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
