"""Repository package exposing persistence-layer access for all auth models."""

from __future__ import annotations

from griya_auth.repositories.base import BaseRepository
from griya_auth.repositories.role import RoleRepository
from griya_auth.repositories.session import UserSessionRepository
from griya_auth.repositories.user import UserRepository
from griya_auth.repositories.verification_token import VerificationTokenRepository

__all__ = [
    "BaseRepository",
    "RoleRepository",
    "UserRepository",
    "UserSessionRepository",
    "VerificationTokenRepository",
]
