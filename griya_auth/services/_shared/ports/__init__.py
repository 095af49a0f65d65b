"""
griya_auth.services._shared.ports
=================================

Ports (hexagonal interfaces) decoupling the auth services from concrete
token and delivery infrastructure.

Modules
-------
- :mod:`token_codec`:
    :class:`~.TokenCodec` for signing, verifying and hashing bearer tokens,
    plus the deterministic :class:`~.StubTokenCodec`.
- :mod:`notifier`:
    :class:`~.Notifier` for verification and password-reset emails, plus the
    recording :class:`~.InMemoryNotifier`.

Concrete adapters live under ``griya_auth.infra``.
"""

from __future__ import annotations

from .notifier import InMemoryNotifier, Notifier, SentMessage
from .token_codec import ACCESS, REFRESH, StubTokenCodec, TokenCodec, sha256_hex

__all__ = [
    "ACCESS",
    "REFRESH",
    "InMemoryNotifier",
    "Notifier",
    "SentMessage",
    "StubTokenCodec",
    "TokenCodec",
    "sha256_hex",
]
