"""Role repository."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from griya_auth.models.role import Role
from griya_auth.repositories.base import BaseRepository


class RoleRepository(BaseRepository[Role]):
    """Persistence-only repository for :class:`Role`."""

    model = Role

    def get_by_name(self, name: str) -> Role | None:
        stmt = select(Role).where(Role.name == name.strip().upper())
        return cast(Role | None, self.session.execute(stmt).scalars().first())

    def get_or_create(self, name: str, description: str | None = None) -> Role:
        """Return the role called ``name``, inserting it when missing."""
        role = self.get_by_name(name)
        if role is None:
            role = self.add(Role(name=name, description=description))
        return role
