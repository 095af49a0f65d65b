"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, request

from griya_auth.api.deps import (
    bearer_token,
    build_auth_service,
    client_ip,
    client_user_agent,
    current_user_id,
    json_response,
    require_auth,
    timing,
    translate_service_errors,
)
from griya_auth.core.errors import Unauthorized
from griya_auth.schemas import (
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
from griya_auth.services.auth.dto import (
    ForgotPasswordIn,
    LoginIn,
    LogoutIn,
    RefreshIn,
    RegisterIn,
    ResetPasswordIn,
)

bp = Blueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_token_schema = RefreshTokenSchema()
validate_token_schema = ValidateTokenSchema()
email_schema = EmailSchema()
verify_email_query_schema = VerifyEmailQuerySchema()
reset_password_schema = ResetPasswordSchema()

profile_schema = UserProfileSchema()
login_response_schema = LoginResponseSchema()
token_pair_schema = TokenPairSchema()
verify_email_response_schema = VerifyEmailResponseSchema()
sessions_schema = SessionSchema(many=True)


def _json_body() -> dict:
    return request.get_json(silent=True) or {}


@bp.post("/register")
@timing
@translate_service_errors
def register():
    """Create a pending account; a verification email is sent."""

    data = register_schema.load(_json_body())
    profile = build_auth_service().register(RegisterIn(**data))
    return json_response({"data": profile_schema.dump(profile)}, status=201)


@bp.post("/login")
@timing
@translate_service_errors
def login():
    """Authenticate credentials and issue an access/refresh token pair."""

    data = login_schema.load(_json_body())
    result = build_auth_service().login(
        LoginIn(
            identifier=data["identifier"],
            password=data["password"],
            ip_address=client_ip(),
            user_agent=client_user_agent(),
        )
    )
    return json_response({"data": login_response_schema.dump(result)})


@bp.post("/refresh")
@timing
@translate_service_errors
def refresh():
    """Rotate the refresh token and return a new pair."""

    data = refresh_token_schema.load(_json_body())
    pair = build_auth_service().refresh(
        RefreshIn(
            refresh_token=data["refresh_token"],
            ip_address=client_ip(),
            user_agent=client_user_agent(),
        )
    )
    return json_response({"data": token_pair_schema.dump(pair)})


@bp.post("/logout")
@timing
@translate_service_errors
def logout():
    """Revoke the session behind the refresh token (no-op when unknown)."""

    data = refresh_token_schema.load(_json_body())
    build_auth_service().logout(LogoutIn(refresh_token=data["refresh_token"]))
    return json_response({"data": {"message": "Logged out"}})


@bp.get("/me")
@require_auth
@timing
@translate_service_errors
def me():
    """Return the profile of the access token's user."""

    token = bearer_token()
    if token is None:
        raise Unauthorized("Missing bearer token", code="invalid_token")
    profile = build_auth_service().get_profile(token)
    return json_response({"data": profile_schema.dump(profile)})


@bp.post("/validate")
@timing
def validate():
    """Report whether an access token verifies."""

    data = validate_token_schema.load(_json_body())
    token = data.get("token") or bearer_token() or ""
    valid = build_auth_service().validate_token(token)
    return json_response({"data": {"valid": valid}})


@bp.get("/verify-email")
@timing
@translate_service_errors
def verify_email():
    """Redeem an email-verification token from the emailed link."""

    data = verify_email_query_schema.load(request.args)
    result = build_auth_service().verify_email(data["token"])
    return json_response({"data": verify_email_response_schema.dump(result)})


@bp.post("/resend-verification")
@timing
@translate_service_errors
def resend_verification():
    data = email_schema.load(_json_body())
    sent = build_auth_service().resend_verification(data["email"])
    message = "Verification email sent" if sent else "Email already verified"
    return json_response({"data": {"message": message, "sent": sent}})


@bp.post("/forgot-password")
@timing
@translate_service_errors
def forgot_password():
    """Email a password-reset link."""

    data = email_schema.load(_json_body())
    build_auth_service().forgot_password(ForgotPasswordIn(email=data["email"]))
    return json_response({"data": {"message": "Password reset email sent"}})


@bp.post("/reset-password")
@timing
@translate_service_errors
def reset_password():
    """Set a new password with a reset token; all sessions are revoked."""

    data = reset_password_schema.load(_json_body())
    build_auth_service().reset_password(ResetPasswordIn(**data))
    return json_response({"data": {"message": "Password has been reset"}})


@bp.get("/sessions")
@require_auth
@timing
@translate_service_errors
def sessions():
    """List the caller's active sessions."""

    items = build_auth_service().list_sessions(current_user_id())
    return json_response({"data": sessions_schema.dump(items)})
