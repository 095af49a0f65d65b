"""Single-use verification token lifecycle."""

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta
from uuid import uuid4

from griya_auth.core.clock import utcnow
from griya_auth.models.user import User
from griya_auth.models.verification_token import TokenPurpose, VerificationToken
from griya_auth.repositories.verification_token import VerificationTokenRepository
from griya_auth.services._shared.errors import TokenAlreadyUsed, TokenExpired, TokenNotFound
from griya_auth.services._shared.ports import sha256_hex


class VerificationTokenStore:
    """
    Issue and redeem hashed single-use tokens.

    Every token is issued for one :class:`TokenPurpose`. A caller that names
    a purpose when inspecting or redeeming never sees a token issued for
    another one.

    :param tokens: Repository sharing the caller's unit of work.
    :param hasher: One-way hash applied to raw tokens.
    """

    def __init__(
        self,
        tokens: VerificationTokenRepository,
        *,
        hasher: Callable[[str], str] = sha256_hex,
    ) -> None:
        self.tokens = tokens
        self.hasher = hasher

    def issue(self, user: User, ttl_minutes: int, purpose: TokenPurpose) -> str:
        """Persist a new token for ``user`` and return the raw value.

        :param user: Token owner.
        :param ttl_minutes: Minutes until the token expires.
        :param purpose: What the token authorizes.
        :returns: Raw token (32 hex chars). Only its hash is stored.
        """
        raw = uuid4().hex
        self.tokens.add(
            VerificationToken(
                token_hash=self.hasher(raw),
                user_id=user.id,
                purpose=purpose,
                expires_at=utcnow() + timedelta(minutes=ttl_minutes),
            )
        )
        return raw

    def inspect(
        self, raw_token: str, purpose: TokenPurpose | None = None
    ) -> VerificationToken:
        """Return the token record if it is redeemable, without consuming it.

        Expiry is checked before the used flag.

        :raises TokenNotFound: Unknown token, or one issued for another purpose.
        :raises TokenExpired: ``expires_at`` has passed.
        :raises TokenAlreadyUsed: The token was redeemed before.
        """
        record = self.tokens.get_by_hash(self.hasher(raw_token))
        if record is None or (purpose is not None and record.purpose != purpose):
            raise TokenNotFound()
        if record.is_expired():
            raise TokenExpired()
        if record.is_used:
            raise TokenAlreadyUsed()
        return record

    def redeem(
        self, raw_token: str, purpose: TokenPurpose | None = None
    ) -> tuple[User, VerificationToken]:
        """Consume the token exactly once.

        :returns: ``(user, record)`` for the single winning caller.
        :raises TokenAlreadyUsed: Also when a concurrent redeem won the race.
        """
        record = self.inspect(raw_token, purpose)
        if not self.tokens.mark_used(record.id, when=utcnow()):
            raise TokenAlreadyUsed()
        return record.user, record
