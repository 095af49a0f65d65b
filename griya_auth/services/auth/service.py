from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError

from griya_auth.core.clock import utcnow
from griya_auth.models.user import User, UserStatus
from griya_auth.models.verification_token import TokenPurpose
from griya_auth.services._shared.base import BaseService, ServiceContext
from griya_auth.services._shared.errors import (
    AccountLocked,
    AccountNotActive,
    AuthError,
    ConflictError,
    EmailNotFound,
    InvalidCredentials,
    InvalidToken,
    PasswordMismatch,
    PasswordUnchanged,
    RefreshTokenInvalid,
    UserNotFound,
    violates,
)
from griya_auth.services._shared.ports import ACCESS, REFRESH, Notifier, TokenCodec
from griya_auth.services.auth.dto import (
    AuthSettings,
    ForgotPasswordIn,
    LoginIn,
    LoginOut,
    LogoutIn,
    RefreshIn,
    RegisterIn,
    ResetPasswordIn,
    SessionOut,
    TokenPairOut,
    UserProfileOut,
    VerifyEmailOut,
)
from griya_auth.services.auth.lockout import LockoutPolicy
from griya_auth.services.auth.session_store import SessionStore
from griya_auth.services.auth.verification_store import VerificationTokenStore
from griya_auth.uow.sqlalchemy_uow import SQLAlchemyRepositoryContainer

log = logging.getLogger(__name__)


class AuthService(BaseService):
    """
    Authentication lifecycle service.

    Orchestrates the token codec, lockout policy, session store and
    verification token store against the user repository. Every mutation runs
    inside a read-write unit of work, so an operation either commits all of
    its effects or none. Emails are handed to the notifier only after the
    transaction that created their token has committed.

    Expected failures are raised as :class:`AuthError` subclasses (or
    :class:`ConflictError` on registration); anything else is an internal
    fault and propagates untouched.
    """

    def __init__(
        self,
        *,
        token_codec: TokenCodec,
        notifier: Notifier,
        settings: AuthSettings | None = None,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param token_codec: Signs, verifies and hashes bearer tokens.
        :param notifier: Delivers verification and password-reset emails.
        :param settings: Lockout, TTL and retention policy.
        :param ctx: Optional request-scoped context.
        """
        super().__init__(ctx=ctx)
        self.tokens = token_codec
        self.notifier = notifier
        self.settings = settings or AuthSettings()

    # ------------------------------------------------------------------ #
    # Collaborators bound to a unit of work
    # ------------------------------------------------------------------ #

    def _lockout(self, uow: SQLAlchemyRepositoryContainer) -> LockoutPolicy:
        return LockoutPolicy(
            uow.users,
            threshold=self.settings.lockout_threshold,
            duration=self.settings.lockout_duration,
        )

    def _sessions(self, uow: SQLAlchemyRepositoryContainer) -> SessionStore:
        return SessionStore(uow.sessions, hasher=self.tokens.hash)

    def _verifications(self, uow: SQLAlchemyRepositoryContainer) -> VerificationTokenStore:
        return VerificationTokenStore(uow.verification_tokens, hasher=self.tokens.hash)

    def _expires_in(self) -> int:
        return int(self.tokens.access_ttl.total_seconds())

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> UserProfileOut:
        """
        Create a pending account and send its email-verification token.

        :raises PasswordMismatch: ``password`` and ``confirm_password`` differ.
        :raises ConflictError: Username, email or phone already registered.
        """
        if dto.password != dto.confirm_password:
            raise PasswordMismatch()

        with self.rw_uow() as uow:
            if uow.users.exists_by_username(dto.username):
                raise ConflictError("User", "Username is already taken")
            if uow.users.exists_by_email(dto.email):
                raise ConflictError("User", "Email is already registered")
            if dto.phone and uow.users.exists_by_phone(dto.phone):
                raise ConflictError("User", "Phone number is already registered")

            role = uow.roles.get_or_create(self.settings.default_role)
            user = User(
                username=dto.username,
                email=dto.email,
                phone=dto.phone,
                role=role,
                status=UserStatus.PENDING_VERIFICATION,
            )
            user.password = dto.password
            try:
                uow.users.add(user)
            except IntegrityError as exc:
                for constraint, field in (
                    ("uq_users_username", "Username"),
                    ("uq_users_email", "Email"),
                    ("uq_users_phone", "Phone number"),
                ):
                    if violates(exc, constraint):
                        raise ConflictError("User", f"{field} is already registered") from exc
                raise

            raw = self._verifications(uow).issue(
                user, self.settings.email_verification_ttl_minutes, TokenPurpose.EMAIL_VERIFICATION
            )
            profile = UserProfileOut.from_model(user)

        log.info("User registered", extra={"user_id": profile.id})
        self.notifier.send_verification_email(profile.email, raw)
        return profile

    # ------------------------------------------------------------------ #
    # Login / refresh / logout
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Authenticate credentials and open a new session.

        Steps, in order: look the user up by username or email, refuse a
        locked account without checking the password, compare the password
        (a mismatch counts toward lockout), require an ``ACTIVE`` status, then
        reset lockout state, stamp ``last_login_at``, issue a token pair and
        persist the session.

        :raises InvalidCredentials: Unknown identifier or wrong password.
        :raises AccountLocked: The lock window is still open.
        :raises AccountNotActive: Credentials are right but status is not ``ACTIVE``.
        """
        failure: AuthError | None = None
        result: LoginOut | None = None

        with self.rw_uow() as uow:
            user = uow.users.find_by_identifier(dto.identifier)
            if user is None:
                log.info("Login failed", extra={"reason": "unknown_identifier"})
                raise InvalidCredentials()

            lockout = self._lockout(uow)
            if lockout.is_locked(user):
                log.warning("Login refused", extra={"user_id": user.id, "reason": "locked"})
                raise AccountLocked()

            if not user.verify_password(dto.password):
                count = lockout.on_failure(user.id)
                log.info(
                    "Login failed",
                    extra={"user_id": user.id, "reason": "bad_password", "count": count},
                )
                # Raised after the block so the counter update commits.
                failure = InvalidCredentials()
            elif user.status != UserStatus.ACTIVE:
                log.info(
                    "Login refused",
                    extra={"user_id": user.id, "reason": f"status_{user.status.value.lower()}"},
                )
                failure = AccountNotActive()
            else:
                now = utcnow()
                lockout.on_success(user.id)
                uow.users.update_last_login(user.id, now)

                access = self.tokens.issue_access_token(
                    username=user.username, user_id=user.id, role=user.role_name
                )
                refresh = self.tokens.issue_refresh_token(
                    username=user.username, user_id=user.id, role=user.role_name
                )
                session = self._sessions(uow).create(
                    user.id, refresh, ip_address=dto.ip_address, user_agent=dto.user_agent
                )
                result = LoginOut(
                    access_token=access,
                    refresh_token=refresh,
                    expires_in=self._expires_in(),
                    user=UserProfileOut.from_model(user),
                )
                log.info(
                    "Login succeeded", extra={"user_id": user.id, "session_id": session.id}
                )

        if failure is not None:
            raise failure
        assert result is not None
        return result

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Rotate a refresh token and emit a new token pair.

        The presented token must verify as a refresh token and still back an
        active session; the swap to the new hash is a compare-and-set, so of
        two concurrent refreshes with the same token only one succeeds.

        :raises RefreshTokenInvalid: Bad/expired token, no active session, or
            a lost rotation race.
        :raises UserNotFound: The token's user no longer exists.
        """
        raw = dto.refresh_token
        if not self.tokens.validate(raw, expected_type=REFRESH):
            raise RefreshTokenInvalid()

        with self.rw_uow() as uow:
            store = self._sessions(uow)
            session = store.find_active_by_refresh_token(raw)
            if session is None:
                log.info("Refresh refused", extra={"reason": "no_active_session"})
                raise RefreshTokenInvalid()

            username = self.tokens.extract_username(raw)
            user = uow.users.get_by_username(username)
            if user is None:
                raise UserNotFound()
            if user.id != session.user_id:
                raise RefreshTokenInvalid()

            access = self.tokens.issue_access_token(
                username=user.username, user_id=user.id, role=user.role_name
            )
            new_refresh = self.tokens.issue_refresh_token(
                username=user.username, user_id=user.id, role=user.role_name
            )
            store.rotate(
                session, new_refresh, ip_address=dto.ip_address, user_agent=dto.user_agent
            )

        return TokenPairOut(
            access_token=access, refresh_token=new_refresh, expires_in=self._expires_in()
        )

    def logout(self, dto: LogoutIn) -> None:
        """
        Revoke the session backing ``dto.refresh_token``.

        An unknown or already revoked token is a successful no-op.
        """
        with self.rw_uow() as uow:
            store = self._sessions(uow)
            session = store.find_active_by_refresh_token(dto.refresh_token)
            if session is None:
                return
            store.revoke(session)

    # ------------------------------------------------------------------ #
    # Token inspection
    # ------------------------------------------------------------------ #

    def get_profile(self, access_token: str) -> UserProfileOut:
        """
        Resolve the user behind an access token.

        :raises InvalidToken: Token fails verification or is not an access token.
        :raises UserNotFound: The token's user no longer exists.
        """
        if not self.tokens.validate(access_token, expected_type=ACCESS):
            raise InvalidToken()
        user_id = self.tokens.extract_user_id(access_token)
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise UserNotFound()
            return UserProfileOut.from_model(user)

    def validate_token(self, token: str, *, expected_type: str | None = ACCESS) -> bool:
        """Return whether ``token`` verifies; never raises for bad input."""
        return self.tokens.validate(token, expected_type=expected_type)

    # ------------------------------------------------------------------ #
    # Email verification
    # ------------------------------------------------------------------ #

    def generate_email_verification_token(
        self, user_id: int, ttl_minutes: int | None = None
    ) -> str:
        """
        Issue an email-verification token for ``user_id``.

        :returns: The raw token; only its hash is stored.
        :raises UserNotFound: Unknown user.
        """
        ttl = ttl_minutes or self.settings.email_verification_ttl_minutes
        with self.rw_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise UserNotFound()
            return self._verifications(uow).issue(user, ttl, TokenPurpose.EMAIL_VERIFICATION)

    def resend_verification(self, email: str) -> bool:
        """
        Send a fresh verification token to an unverified address.

        :returns: ``False`` when the address is already verified (nothing sent).
        :raises EmailNotFound: No user has this email.
        """
        ttl = self.settings.email_verification_ttl_minutes
        with self.rw_uow() as uow:
            user = uow.users.get_by_email(email)
            if user is None:
                raise EmailNotFound()
            if user.is_email_verified:
                return False
            raw = self._verifications(uow).issue(user, ttl, TokenPurpose.EMAIL_VERIFICATION)
            address = user.email

        self.notifier.send_verification_email(address, raw)
        return True

    def verify_email(self, raw_token: str) -> VerifyEmailOut:
        """
        Redeem a verification token and activate the account.

        Redeeming a fresh token for an already verified user succeeds without
        changing the user.

        :raises TokenNotFound: Unknown token, or one issued for a password reset.
        :raises TokenExpired: Token past ``expires_at``.
        :raises TokenAlreadyUsed: Token redeemed before.
        """
        with self.rw_uow() as uow:
            user, _record = self._verifications(uow).redeem(
                raw_token, TokenPurpose.EMAIL_VERIFICATION
            )
            already_verified = user.is_email_verified
            if not already_verified:
                uow.users.mark_email_verified(user, utcnow())
                log.info("Email verified", extra={"user_id": user.id})
            return VerifyEmailOut(
                user_id=user.id,
                email=user.email,
                verified_at=user.email_verified_at,
                already_verified=already_verified,
            )

    # ------------------------------------------------------------------ #
    # Password reset
    # ------------------------------------------------------------------ #

    def forgot_password(self, dto: ForgotPasswordIn) -> None:
        """
        Email a password-reset token.

        :raises EmailNotFound: No user has this email (no token is created).
        """
        ttl = self.settings.password_reset_ttl_minutes
        with self.rw_uow() as uow:
            user = uow.users.get_by_email(dto.email)
            if user is None:
                raise EmailNotFound()
            raw = self._verifications(uow).issue(user, ttl, TokenPurpose.PASSWORD_RESET)
            address = user.email
            user_id = user.id

        log.info("Password reset requested", extra={"user_id": user_id})
        self.notifier.send_password_reset_email(address, raw, ttl)

    def reset_password(self, dto: ResetPasswordIn) -> None:
        """
        Replace the password using a reset token.

        On success, in one transaction: the token is consumed, the new hash
        written, lockout state cleared and every session of the user revoked.

        :raises PasswordMismatch: A confirmation was given and differs.
        :raises TokenNotFound | TokenExpired | TokenAlreadyUsed: Bad token.
        :raises PasswordUnchanged: New password equals the current one; nothing
            is modified.
        """
        if dto.confirm_password is not None and dto.confirm_password != dto.new_password:
            raise PasswordMismatch()

        with self.rw_uow() as uow:
            tokens = self._verifications(uow)
            user = tokens.inspect(dto.token, TokenPurpose.PASSWORD_RESET).user
            if user.verify_password(dto.new_password):
                raise PasswordUnchanged()

            tokens.redeem(dto.token, TokenPurpose.PASSWORD_RESET)
            uow.users.set_password(user, dto.new_password)
            self._lockout(uow).on_success(user.id)
            revoked = self._sessions(uow).revoke_all(user.id)
            log.info("Password reset", extra={"user_id": user.id, "count": revoked})

    # ------------------------------------------------------------------ #
    # Administration
    # ------------------------------------------------------------------ #

    def unlock_account(self, user_id: int) -> None:
        """:raises UserNotFound: Unknown user."""
        with self.rw_uow() as uow:
            if not self._lockout(uow).unlock(user_id):
                raise UserNotFound()

    def list_sessions(self, user_id: int) -> list[SessionOut]:
        with self.ro_uow() as uow:
            return [SessionOut.from_model(s) for s in self._sessions(uow).list_active(user_id)]

    def cleanup_expired_sessions(
        self, now: datetime | None = None, *, retention: timedelta | None = None
    ) -> int:
        """
        Delete sessions inactive for longer than the retention window.

        :param now: Reference time (defaults to the current UTC time).
        :param retention: Overrides the configured inactivity window.
        :returns: Number of sessions removed.
        """
        cutoff = (now or utcnow()) - (retention or self.settings.session_retention)
        with self.rw_uow() as uow:
            return self._sessions(uow).cleanup_expired(cutoff)
