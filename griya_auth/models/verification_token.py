"""Single-use verification tokens (email confirmation, password reset)."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from griya_auth.core.clock import as_utc, utcnow
from griya_auth.core.extensions import db

from .base import CreatedAtMixin, PKMixin, ReprMixin

if TYPE_CHECKING:
    from .user import User


class TokenPurpose(str, Enum):
    """What a verification token authorizes; purposes never substitute."""

    EMAIL_VERIFICATION = "EMAIL_VERIFICATION"
    PASSWORD_RESET = "PASSWORD_RESET"


class VerificationToken(PKMixin, ReprMixin, CreatedAtMixin, db.Model):
    """
    Hashed single-use token bound to a user.

    ``purpose`` records what the token was issued for and redeeming callers
    must check it. ``used_at`` moves from ``NULL`` to a timestamp exactly once.
    """

    __tablename__ = "verification_tokens"

    token_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    purpose: Mapped[TokenPurpose] = mapped_column(
        SAEnum(TokenPurpose, name="token_purpose", native_enum=True, create_constraint=True),
        nullable=False,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped[User] = relationship("User", lazy="joined")

    __table_args__ = (
        UniqueConstraint("token_hash", name="uq_verification_tokens_token_hash"),
        Index("ix_verification_tokens_expires_at", "expires_at"),
    )

    @property
    def is_used(self) -> bool:
        return self.used_at is not None

    def is_expired(self, now: datetime | None = None) -> bool:
        expires = as_utc(self.expires_at)
        return expires is not None and expires <= (now or utcnow())
