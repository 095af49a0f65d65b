"""User model: credential holder and lockout state."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
from werkzeug.security import check_password_hash, generate_password_hash

from griya_auth.core.clock import as_utc, utcnow
from griya_auth.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .role import Role
    from .session import UserSession


class UserStatus(str, Enum):
    """Account lifecycle status."""

    PENDING_VERIFICATION = "PENDING_VERIFICATION"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Authentication identity.

    Fields
    ------
    username : str
        Unique login handle (trimmed).
    email : str
        Unique login email, stored normalized (lowercase, trimmed).
    phone : str | None
        Optional unique phone number.
    password_hash : str
        Hashed password (write-only setter via ``password``).
    role_id : int
        Owning :class:`Role`.
    status : UserStatus
        Lifecycle status; only ``ACTIVE`` accounts may log in.
    failed_login_attempts : int
        Consecutive failed logins since the last success or unlock.
    locked_until : datetime | None
        End of the current lock window, if any.
    email_verified_at, phone_verified_at, last_login_at : datetime | None
        Audit timestamps.
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(254), nullable=False)
    role_id: Mapped[int] = mapped_column(
        ForeignKey("roles.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    status: Mapped[UserStatus] = mapped_column(
        SAEnum(UserStatus, name="user_status", native_enum=True, create_constraint=True),
        nullable=False,
        default=UserStatus.PENDING_VERIFICATION,
    )
    failed_login_attempts: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    locked_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    email_verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    phone_verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    role: Mapped[Role] = relationship("Role", lazy="joined")
    sessions: Mapped[list[UserSession]] = relationship(
        "UserSession",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="select",
    )

    __table_args__ = (
        UniqueConstraint("username", name="uq_users_username"),
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("phone", name="uq_users_phone"),
        Index("ix_users_email", "email"),
        Index("ix_users_username", "username"),
    )

    # -------------------- Password API --------------------
    @property
    def password(self) -> Any:  # pragma: no cover - explicit write-only contract
        """
        Disallow reading passwords.

        :raises AttributeError: Always, to ensure password is write-only.
        """
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        """
        Hash and set the password.

        :param raw: Plain text password to hash.
        :type raw: str
        """
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        """
        Verify a password against the stored hash.

        :param raw: Plain text password candidate.
        :returns: ``True`` if it matches; otherwise ``False``.
        :rtype: bool
        """
        if not self.password_hash:
            return False
        return bool(check_password_hash(self.password_hash, raw))

    # -------------------- State helpers --------------------
    @property
    def role_name(self) -> str | None:
        return self.role.name if self.role is not None else None

    @property
    def is_email_verified(self) -> bool:
        return self.email_verified_at is not None

    def is_locked(self, now: datetime | None = None) -> bool:
        """Return ``True`` while ``locked_until`` lies in the future."""
        until = as_utc(self.locked_until)
        return until is not None and until > (now or utcnow())

    def is_account_active(self, now: datetime | None = None) -> bool:
        """Return ``True`` for an ``ACTIVE`` account that is not currently locked."""
        return self.status == UserStatus.ACTIVE and not self.is_locked(now)

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("username")
    def _normalize_username(self, key: str, value: str) -> str:
        if not isinstance(value, str):
            raise ValueError("Username is required.")
        v = value.strip()
        if not v:
            raise ValueError("Username is required.")
        return v

    @validates("phone")
    def _normalize_phone(self, key: str, value: str | None) -> str | None:
        if value is None:
            return None
        v = value.strip()
        return v or None
