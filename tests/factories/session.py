"""Factory Boy definition for :class:`UserSession`."""

from __future__ import annotations

import json

import factory

from griya_auth.core.clock import utcnow
from griya_auth.models.session import SessionStatus, UserSession
from griya_auth.services._shared.ports import sha256_hex
from tests.factories import BaseFactory
from tests.factories.user import UserFactory


class UserSessionFactory(BaseFactory):
    """
    Build persisted sessions.

    Pass ``raw_token="..."`` to store the hash of a known refresh token.
    """

    class Meta:
        model = UserSession
        exclude = ("raw_token",)

    user = factory.SubFactory(UserFactory)
    raw_token = factory.Sequence(lambda n: f"refresh-token-{n}")
    refresh_token_hash = factory.LazyAttribute(lambda o: sha256_hex(o.raw_token))
    ip_address = factory.Faker("ipv4")
    user_agent = factory.Faker("user_agent")
    payload = factory.LazyFunction(lambda: json.dumps({"loginTime": utcnow().isoformat()}))
    status = SessionStatus.ACTIVE
    last_activity = factory.LazyFunction(utcnow)
