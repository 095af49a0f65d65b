from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Any, cast
from uuid import uuid4

import jwt

from griya_auth.services._shared.errors import TokenDecodeError
from griya_auth.services._shared.ports import ACCESS, REFRESH, TokenCodec, sha256_hex
from griya_auth.services.auth.dto import TokenSettings

log = logging.getLogger(__name__)

_REQUIRED_CLAIMS = ["exp", "iat", "sub", "type", "uid"]


class JWTTokenCodec(TokenCodec):
    """
    HMAC-signed JWT codec built on PyJWT.

    The claim layout matches what Flask-JWT-Extended emits and expects
    (``sub``, ``type``, ``jti``, ``fresh``, ``nbf``), so routes guarded with
    ``verify_jwt_in_request()`` accept these tokens when both share
    ``JWT_SECRET_KEY``. Extra claims: ``uid`` (numeric user id) and ``role``.

    .. note::
       Settings are captured once at construction; the codec reads no
       application globals and is safe to share across threads.
    """

    def __init__(self, settings: TokenSettings) -> None:
        if not settings.secret:
            raise ValueError("TokenSettings.secret must be non-empty.")
        self.settings = settings

    @property
    def access_ttl(self) -> timedelta:
        return self.settings.access_ttl

    # ------------------------------------------------------------------ #
    # Issue
    # ------------------------------------------------------------------ #

    def _encode(
        self, *, ttype: str, username: str, user_id: int, role: str | None, ttl: timedelta
    ) -> str:
        now = datetime.now(UTC)
        claims: dict[str, Any] = {
            "sub": username,
            "uid": user_id,
            "role": role,
            "type": ttype,
            "jti": str(uuid4()),
            "fresh": False,
            "iat": now,
            "nbf": now,
            "exp": now + ttl,
        }
        if self.settings.issuer:
            claims["iss"] = self.settings.issuer
        return jwt.encode(claims, self.settings.secret, algorithm=self.settings.algorithm)

    def issue_access_token(self, *, username: str, user_id: int, role: str | None) -> str:
        return self._encode(
            ttype=ACCESS,
            username=username,
            user_id=user_id,
            role=role,
            ttl=self.settings.access_ttl,
        )

    def issue_refresh_token(self, *, username: str, user_id: int, role: str | None) -> str:
        return self._encode(
            ttype=REFRESH,
            username=username,
            user_id=user_id,
            role=role,
            ttl=self.settings.refresh_ttl,
        )

    # ------------------------------------------------------------------ #
    # Verify / decode
    # ------------------------------------------------------------------ #

    def decode(self, token: str) -> dict[str, Any]:
        """
        Verify signature, structure, timestamps and (when configured) issuer.

        :raises TokenDecodeError: On any verification failure.
        """
        try:
            return cast(
                dict[str, Any],
                jwt.decode(
                    token,
                    self.settings.secret,
                    algorithms=[self.settings.algorithm],
                    issuer=self.settings.issuer,
                    options={"require": _REQUIRED_CLAIMS},
                ),
            )
        except jwt.PyJWTError as exc:
            log.debug("Token rejected: %s", type(exc).__name__)
            raise TokenDecodeError() from exc

    def validate(self, token: str, *, expected_type: str | None = None) -> bool:
        if not token:
            return False
        try:
            claims = self.decode(token)
        except TokenDecodeError:
            return False
        return expected_type is None or claims.get("type") == expected_type

    def extract_username(self, token: str) -> str:
        return str(self.decode(token)["sub"])

    def extract_user_id(self, token: str) -> int:
        try:
            return int(self.decode(token)["uid"])
        except (TypeError, ValueError) as exc:
            raise TokenDecodeError() from exc

    def extract_role(self, token: str) -> str | None:
        role = self.decode(token).get("role")
        return str(role) if role is not None else None

    def hash(self, secret: str) -> str:
        return sha256_hex(secret)
