"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    EmailSchema,
    LoginResponseSchema,
    LoginSchema,
    RefreshTokenSchema,
    RegisterSchema,
    ResetPasswordSchema,
    SessionSchema,
    TokenPairSchema,
    UserProfileSchema,
    ValidateTokenSchema,
    VerifyEmailQuerySchema,
    VerifyEmailResponseSchema,
)

__all__ = [
    "EmailSchema",
    "LoginResponseSchema",
    "LoginSchema",
    "RefreshTokenSchema",
    "RegisterSchema",
    "ResetPasswordSchema",
    "SessionSchema",
    "TokenPairSchema",
    "UserProfileSchema",
    "ValidateTokenSchema",
    "VerifyEmailQuerySchema",
    "VerifyEmailResponseSchema",
]
