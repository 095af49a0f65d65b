"""Service layer public API.

Callers can import from :mod:`griya_auth.services` without knowing the
internal structure.

Re-exports
----------
- Base primitives (from ``griya_auth.services._shared.base``)
    * :class:`BaseService`
    * :class:`ServiceContext`

- Authentication (from ``griya_auth.services.auth``)
    * :class:`AuthService`
    * :class:`AuthSettings`
"""

from __future__ import annotations

from ._shared.base import BaseService, ServiceContext
from .auth.dto import AuthSettings
from .auth.service import AuthService

__all__ = [
    "AuthService",
    "AuthSettings",
    "BaseService",
    "ServiceContext",
]
