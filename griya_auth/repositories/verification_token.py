"""Verification token repository."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import select, update

from griya_auth.models.verification_token import VerificationToken
from griya_auth.repositories.base import BaseRepository


class VerificationTokenRepository(BaseRepository[VerificationToken]):
    """Persistence-only repository for :class:`VerificationToken`."""

    model = VerificationToken

    def get_by_hash(self, token_hash: str) -> VerificationToken | None:
        stmt = select(VerificationToken).where(VerificationToken.token_hash == token_hash)
        return cast(VerificationToken | None, self.session.execute(stmt).scalars().first())

    def mark_used(self, token_id: int, *, when: datetime) -> bool:
        """Set ``used_at`` only if it is still ``NULL``.

        :returns: ``True`` for the single caller that performed the transition.
        """
        stmt = (
            update(VerificationToken)
            .where(VerificationToken.id == token_id, VerificationToken.used_at.is_(None))
            .values(used_at=when)
            .execution_options(synchronize_session="fetch")
        )
        return self.session.execute(stmt).rowcount == 1
