"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never depend on Flask or HTTP.
They are the stable contract between repositories, stores and services; the
translation to RFC 7807 responses happens in
:meth:`griya_auth.services._shared.base.BaseService.translate_exceptions`.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The database constraint to match (e.g., ``'uq_users_email'``). SQLite
        reports the column instead of the constraint, so the column part of
        the name is matched as well.

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    name = constraint_name.lower()
    if name in message:
        return True
    # uq_users_email -> "users.email"
    parts = name.split("_", 2)
    return len(parts) == 3 and f"{parts[1]}.{parts[2]}" in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories, stores or domain logic.
    """

    pass


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:  # pragma: no cover
        return f"Conflict on {self.entity}: {self.detail}"


# --------------------------------------------------------------------------- #
# Authentication failures
# --------------------------------------------------------------------------- #


class AuthError(ServiceError):
    """
    Expected authentication failure with a stable ``code``.

    Subclasses fix ``code``, ``status_code`` (an HTTP hint consumed only by
    the translation layer) and a client-safe default ``message``.
    """

    code: str = "auth_error"
    status_code: int = 400
    message: str = "Authentication error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or type(self).message
        super().__init__(self.message)


class InvalidCredentials(AuthError):
    code = "invalid_credentials"
    status_code = 401
    message = "Invalid username/email or password"


class AccountLocked(AuthError):
    code = "account_locked"
    status_code = 423
    message = "Account locked after too many failed login attempts"


class AccountNotActive(AuthError):
    code = "account_not_active"
    status_code = 403
    message = "Account is not active"


class RefreshTokenInvalid(AuthError):
    code = "refresh_token_invalid"
    status_code = 401
    message = "Refresh token not found or revoked"


class InvalidToken(AuthError):
    code = "invalid_token"
    status_code = 401
    message = "Invalid or expired token"


class TokenDecodeError(InvalidToken):
    """Raised by codec extractors when the token does not verify."""


class UserNotFound(AuthError):
    code = "user_not_found"
    status_code = 404
    message = "User not found"


class TokenNotFound(AuthError):
    code = "token_not_found"
    status_code = 400
    message = "Invalid token"


class TokenExpired(AuthError):
    code = "token_expired"
    status_code = 400
    message = "Token expired"


class TokenAlreadyUsed(AuthError):
    code = "token_already_used"
    status_code = 400
    message = "Token already used"


class EmailNotFound(AuthError):
    code = "email_not_found"
    status_code = 404
    message = "Email not found"


class PasswordUnchanged(AuthError):
    code = "password_unchanged"
    status_code = 400
    message = "New password cannot be the same as old password"


class PasswordMismatch(AuthError):
    code = "password_mismatch"
    status_code = 400
    message = "Password and confirmation do not match"
