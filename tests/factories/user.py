"""Factory Boy definitions for :class:`Role` and :class:`User`."""

from __future__ import annotations

import factory

from griya_auth.models.role import Role
from griya_auth.models.user import User, UserStatus
from tests.factories import BaseFactory, SQLAlchemySession

DEFAULT_PASSWORD = "Passw0rd!"


class RoleFactory(BaseFactory):
    class Meta:
        model = Role
        sqlalchemy_get_or_create = ("name",)

    name = "USER"
    description = "Self-registered account"


class UserFactory(BaseFactory):
    """
    Build persisted :class:`User` instances.

    Notes
    -----
    - Users are ``ACTIVE`` with a verified email unless overridden; pass
      ``status=UserStatus.PENDING_VERIFICATION, email_verified_at=None`` for a
      freshly registered account.
    - The raw password defaults to :data:`DEFAULT_PASSWORD`.
    """

    class Meta:
        model = User

    id = None  # let autoincrement handle it
    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    phone = None
    role = factory.SubFactory(RoleFactory)
    status = UserStatus.ACTIVE
    failed_login_attempts = 0
    locked_until = None
    email_verified_at = factory.Faker("date_time_this_year", tzinfo=None)
    password_hash = ""  # set via postgen

    @factory.post_generation
    def password(obj, create, extracted, **kwargs):
        """Set password using model setter (ensures hashing)."""
        obj.password = extracted or DEFAULT_PASSWORD
        if create:
            SQLAlchemySession.get().commit()
