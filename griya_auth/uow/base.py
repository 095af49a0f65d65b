"""Abstract Unit of Work contract for auth use-cases."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from griya_auth.repositories import (
        RoleRepository,
        UserRepository,
        UserSessionRepository,
        VerificationTokenRepository,
    )


class UnitOfWork(ABC):
    """
    Transactional boundary around one auth operation.

    Every repository exposed here shares the same transaction, so a login
    that resets the lockout counter and opens a session either persists both
    or neither.
    """

    users: UserRepository
    roles: RoleRepository
    sessions: UserSessionRepository
    verification_tokens: VerificationTokenRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
