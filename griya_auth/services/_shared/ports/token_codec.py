from __future__ import annotations

import hashlib
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

from griya_auth.services._shared.errors import TokenDecodeError

ACCESS = "access"
REFRESH = "refresh"


def sha256_hex(secret: str) -> str:
    """Return the SHA-256 hex digest of ``secret`` encoded as UTF-8."""
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


class TokenCodec(Protocol):
    """Port for signing, verifying and hashing bearer tokens.

    Implementations are stateless once constructed and safe to share across
    threads.
    """

    def issue_access_token(self, *, username: str, user_id: int, role: str | None) -> str: ...

    def issue_refresh_token(self, *, username: str, user_id: int, role: str | None) -> str: ...

    def validate(self, token: str, *, expected_type: str | None = None) -> bool: ...

    def extract_username(self, token: str) -> str: ...

    def extract_user_id(self, token: str) -> int: ...

    def extract_role(self, token: str) -> str | None: ...

    def hash(self, secret: str) -> str: ...

    @property
    def access_ttl(self) -> timedelta: ...


class StubTokenCodec(TokenCodec):
    """Deterministic, signature-free codec used in unit tests.

    Tokens are opaque strings remembered in memory; :meth:`expire` lets a test
    age a token past its ``exp`` without waiting.
    """

    def __init__(
        self,
        *,
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
    ) -> None:
        self._access_ttl = access_ttl
        self._refresh_ttl = refresh_ttl
        self._seq = 0
        self._issued: dict[str, dict[str, Any]] = {}

    @property
    def access_ttl(self) -> timedelta:
        return self._access_ttl

    def _mk(self, *, ttype: str, username: str, user_id: int, role: str | None) -> str:
        self._seq += 1
        ttl = self._access_ttl if ttype == ACCESS else self._refresh_ttl
        token = f"{ttype}.{username}.{user_id}.{self._seq}"
        self._issued[token] = {
            "sub": username,
            "uid": user_id,
            "role": role,
            "type": ttype,
            "exp": datetime.now(UTC) + ttl,
        }
        return token

    def issue_access_token(self, *, username: str, user_id: int, role: str | None) -> str:
        return self._mk(ttype=ACCESS, username=username, user_id=user_id, role=role)

    def issue_refresh_token(self, *, username: str, user_id: int, role: str | None) -> str:
        return self._mk(ttype=REFRESH, username=username, user_id=user_id, role=role)

    def expire(self, token: str) -> None:
        self._issued[token]["exp"] = datetime.now(UTC) - timedelta(seconds=1)

    def _claims(self, token: str) -> dict[str, Any] | None:
        claims = self._issued.get(token)
        if claims is None or claims["exp"] <= datetime.now(UTC):
            return None
        return claims

    def validate(self, token: str, *, expected_type: str | None = None) -> bool:
        claims = self._claims(token)
        if claims is None:
            return False
        return expected_type is None or claims["type"] == expected_type

    def _require(self, token: str) -> dict[str, Any]:
        claims = self._claims(token)
        if claims is None:
            raise TokenDecodeError()
        return claims

    def extract_username(self, token: str) -> str:
        return str(self._require(token)["sub"])

    def extract_user_id(self, token: str) -> int:
        return int(self._require(token)["uid"])

    def extract_role(self, token: str) -> str | None:
        return self._require(token)["role"]

    def hash(self, secret: str) -> str:
        return sha256_hex(secret)
