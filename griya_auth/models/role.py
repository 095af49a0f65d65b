"""Role model: coarse-grained label attached to every user."""

from __future__ import annotations

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from griya_auth.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin


class Role(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Named role such as ``USER``, ``ADMIN`` or ``DEVELOPER``.

    The auth layer only copies the role name into issued tokens; deciding what
    a role may do is left to consumers.
    """

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (UniqueConstraint("name", name="uq_roles_name"),)

    @validates("name")
    def _normalize_name(self, key: str, value: str) -> str:
        """Store role names trimmed and upper-cased.

        :raises ValueError: If the name is blank.
        """
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Role name is required.")
        return value.strip().upper()
