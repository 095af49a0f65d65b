from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from griya_auth.core.clock import as_utc

if TYPE_CHECKING:
    from griya_auth.models.session import UserSession
    from griya_auth.models.user import User


def _minutes(value: Any) -> timedelta:
    if isinstance(value, timedelta):
        return value
    return timedelta(minutes=int(value))


# ---------------------------- Settings ------------------------------------ #


@dataclass(frozen=True, slots=True)
class TokenSettings:
    """
    Immutable signing configuration handed to the token codec.

    :param secret: HMAC signing key.
    :type secret: str
    :param algorithm: JWS algorithm (``HS256`` by default).
    :type algorithm: str
    :param access_ttl: Access token lifetime.
    :type access_ttl: timedelta
    :param refresh_ttl: Refresh token lifetime.
    :type refresh_ttl: timedelta
    :param issuer: Optional ``iss`` claim written and required on decode.
    :type issuer: str | None
    """

    secret: str
    algorithm: str = "HS256"
    access_ttl: timedelta = timedelta(minutes=15)
    refresh_ttl: timedelta = timedelta(days=7)
    issuer: str | None = None

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> TokenSettings:
        access = config.get("JWT_ACCESS_TOKEN_EXPIRES", timedelta(minutes=15))
        refresh = config.get("JWT_REFRESH_TOKEN_EXPIRES", timedelta(days=7))
        return cls(
            secret=str(config["JWT_SECRET_KEY"]),
            algorithm=str(config.get("JWT_ALGORITHM", "HS256")),
            access_ttl=_minutes(access),
            refresh_ttl=refresh if isinstance(refresh, timedelta) else timedelta(days=int(refresh)),
            issuer=config.get("JWT_ISSUER") or None,
        )


@dataclass(frozen=True, slots=True)
class AuthSettings:
    """
    Policy knobs for the authentication service.

    :param lockout_threshold: Failed logins that lock the account.
    :param lockout_duration: Lock window length.
    :param email_verification_ttl_minutes: Email-verification token lifetime.
    :param password_reset_ttl_minutes: Password-reset token lifetime.
    :param session_retention: Inactivity after which sessions are deleted.
    :param default_role: Role name given to self-registered users.
    """

    lockout_threshold: int = 3
    lockout_duration: timedelta = timedelta(minutes=30)
    email_verification_ttl_minutes: int = 1440
    password_reset_ttl_minutes: int = 15
    session_retention: timedelta = timedelta(days=30)
    default_role: str = "USER"

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> AuthSettings:
        return cls(
            lockout_threshold=int(config.get("AUTH_LOCKOUT_THRESHOLD", 3)),
            lockout_duration=timedelta(minutes=int(config.get("AUTH_LOCKOUT_MINUTES", 30))),
            email_verification_ttl_minutes=int(
                config.get("AUTH_EMAIL_VERIFICATION_TTL_MINUTES", 1440)
            ),
            password_reset_ttl_minutes=int(config.get("AUTH_PASSWORD_RESET_TTL_MINUTES", 15)),
            session_retention=timedelta(days=int(config.get("AUTH_SESSION_RETENTION_DAYS", 30))),
            default_role=str(config.get("AUTH_DEFAULT_ROLE", "USER")),
        )


# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for self-registration.

    :param username: Desired unique handle.
    :param email: Email address (normalized by the model).
    :param password: Raw password.
    :param confirm_password: Must equal ``password``.
    :param phone: Optional unique phone number.
    """

    username: str
    email: str
    password: str
    confirm_password: str
    phone: str | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param identifier: Username or email.
    :type identifier: str
    :param password: Raw password (to be verified).
    :type password: str
    :param ip_address: Client address recorded on the new session.
    :param user_agent: Client user agent recorded on the new session.
    """

    identifier: str
    password: str
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    refresh_token: str
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param refresh_token: Raw refresh token identifying the session.
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class ForgotPasswordIn:
    email: str


@dataclass(frozen=True, slots=True)
class ResetPasswordIn:
    """
    Input DTO for password reset.

    :param token: Raw password-reset token from the email link.
    :param new_password: Replacement password.
    :param confirm_password: Optional confirmation; must match when given.
    """

    token: str
    new_password: str
    confirm_password: str | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class UserProfileOut:
    """Public view of a user record."""

    id: int
    username: str
    email: str
    phone: str | None
    role: str | None
    status: str
    email_verified: bool
    email_verified_at: datetime | None
    last_login_at: datetime | None
    created_at: datetime | None

    @classmethod
    def from_model(cls, user: User) -> UserProfileOut:
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            phone=user.phone,
            role=user.role_name,
            status=user.status.value,
            email_verified=user.is_email_verified,
            email_verified_at=as_utc(user.email_verified_at),
            last_login_at=as_utc(user.last_login_at),
            created_at=as_utc(user.created_at),
        )


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :param refresh_token: Encoded refresh JWT.
    :param expires_in: Access token lifetime in seconds.
    """

    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "Bearer"


@dataclass(frozen=True, slots=True)
class LoginOut:
    """Token pair plus the authenticated user's profile."""

    access_token: str
    refresh_token: str
    expires_in: int
    user: UserProfileOut
    token_type: str = "Bearer"


@dataclass(frozen=True, slots=True)
class VerifyEmailOut:
    """
    Result of email verification.

    :param already_verified: ``True`` when the address had been confirmed
        before this token was redeemed.
    """

    user_id: int
    email: str
    verified_at: datetime | None
    already_verified: bool


@dataclass(frozen=True, slots=True)
class SessionOut:
    """Public view of an active session."""

    id: str
    ip_address: str | None
    user_agent: str | None
    login_time: str | None
    last_activity: datetime | None
    created_at: datetime | None

    @classmethod
    def from_model(cls, session: UserSession) -> SessionOut:
        return cls(
            id=session.id,
            ip_address=session.ip_address,
            user_agent=session.user_agent,
            login_time=session.metadata_dict.get("loginTime"),
            last_activity=as_utc(session.last_activity),
            created_at=as_utc(session.created_at),
        )
