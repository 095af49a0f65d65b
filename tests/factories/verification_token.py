"""Factory Boy definition for :class:`VerificationToken`."""

from __future__ import annotations

from datetime import timedelta

import factory

from griya_auth.core.clock import utcnow
from griya_auth.models.verification_token import TokenPurpose, VerificationToken
from griya_auth.services._shared.ports import sha256_hex
from tests.factories import BaseFactory
from tests.factories.user import UserFactory


class VerificationTokenFactory(BaseFactory):
    """
    Build persisted verification tokens.

    ``raw_token`` is excluded from the model; its hash is stored. Pass
    ``expires_at`` in the past for an expired token, or ``used_at`` for a
    consumed one. Tokens default to the email-verification purpose.
    """

    class Meta:
        model = VerificationToken
        exclude = ("raw_token",)

    id = None
    user = factory.SubFactory(UserFactory)
    raw_token = factory.Faker("hexify", text="^" * 32)
    purpose = TokenPurpose.EMAIL_VERIFICATION
    token_hash = factory.LazyAttribute(lambda o: sha256_hex(o.raw_token))
    expires_at = factory.LazyFunction(lambda: utcnow() + timedelta(hours=1))
    used_at = None
