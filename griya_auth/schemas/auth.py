"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

_PASSWORD = validate.Length(min=8, max=128)


class RegisterSchema(Schema):
    """Input payload for account registration."""

    username = fields.String(required=True, validate=validate.Length(min=3, max=50))
    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=_PASSWORD)
    confirm_password = fields.String(required=True, validate=validate.Length(max=128))
    phone = fields.String(load_default=None, validate=validate.Length(max=32))


class LoginSchema(Schema):
    """Input payload for authenticating a user by username or email."""

    identifier = fields.String(required=True, validate=validate.Length(min=1, max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RefreshTokenSchema(Schema):
    """Input payload carrying a raw refresh token (refresh and logout)."""

    refresh_token = fields.String(required=True, validate=validate.Length(min=1))


class ValidateTokenSchema(Schema):
    """Optional body token; the ``Authorization`` header is used when absent."""

    token = fields.String(load_default=None)


class EmailSchema(Schema):
    email = fields.Email(required=True, validate=validate.Length(max=254))


class VerifyEmailQuerySchema(Schema):
    token = fields.String(required=True, validate=validate.Length(min=1))


class ResetPasswordSchema(Schema):
    """Input payload for completing a password reset."""

    token = fields.String(required=True, validate=validate.Length(min=1))
    new_password = fields.String(required=True, validate=_PASSWORD)
    confirm_password = fields.String(load_default=None, validate=validate.Length(max=128))


# ------------------------------ Responses ---------------------------------- #


class UserProfileSchema(Schema):
    """Public user profile."""

    id = fields.Integer(required=True)
    username = fields.String(required=True)
    email = fields.Email(required=True)
    phone = fields.String(allow_none=True)
    role = fields.String(allow_none=True)
    status = fields.String(required=True)
    email_verified = fields.Boolean(required=True)
    email_verified_at = fields.DateTime(allow_none=True)
    last_login_at = fields.DateTime(allow_none=True)
    created_at = fields.DateTime(allow_none=True)


class TokenPairSchema(Schema):
    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    token_type = fields.String(required=True)
    expires_in = fields.Integer(required=True)


class LoginResponseSchema(TokenPairSchema):
    """Token pair plus the authenticated user's profile."""

    user = fields.Nested(UserProfileSchema, required=True)


class VerifyEmailResponseSchema(Schema):
    user_id = fields.Integer(required=True)
    email = fields.Email(required=True)
    verified_at = fields.DateTime(allow_none=True)
    already_verified = fields.Boolean(required=True)


class SessionSchema(Schema):
    """Active session as shown to its owner."""

    id = fields.String(required=True)
    ip_address = fields.String(allow_none=True)
    user_agent = fields.String(allow_none=True)
    login_time = fields.String(allow_none=True)
    last_activity = fields.DateTime(allow_none=True)
    created_at = fields.DateTime(allow_none=True)
