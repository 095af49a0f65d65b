from .dto import (
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
    TokenSettings,
    UserProfileOut,
    VerifyEmailOut,
)
from .lockout import LockoutPolicy
from .service import AuthService
from .session_store import SessionStore
from .verification_store import VerificationTokenStore

__all__ = [
    "AuthService",
    "AuthSettings",
    "ForgotPasswordIn",
    "LockoutPolicy",
    "LoginIn",
    "LoginOut",
    "LogoutIn",
    "RefreshIn",
    "RegisterIn",
    "ResetPasswordIn",
    "SessionOut",
    "SessionStore",
    "TokenPairOut",
    "TokenSettings",
    "UserProfileOut",
    "VerificationTokenStore",
    "VerifyEmailOut",
]
