"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import get_jwt, verify_jwt_in_request

from griya_auth.core.errors import Unauthorized
from griya_auth.core.extensions import get_notifier, get_token_codec
from griya_auth.core.logger import ensure_request_id
from griya_auth.services._shared.base import BaseService, ServiceContext
from griya_auth.services._shared.errors import ServiceError
from griya_auth.services.auth.dto import AuthSettings
from griya_auth.services.auth.service import AuthService

F = TypeVar("F", bound=Callable[..., Any])


def client_ip() -> str | None:
    """Client address as resolved by Werkzeug (``ProxyFix``-aware)."""
    return request.remote_addr


def client_user_agent() -> str | None:
    ua = request.headers.get("User-Agent")
    return ua[:512] if ua else None


def bearer_token() -> str | None:
    """Return the raw token from ``Authorization: Bearer <token>``, if any."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def build_auth_service() -> AuthService:
    """Wire an :class:`AuthService` from the app's codec, notifier and config."""
    ctx = ServiceContext(
        request_id=ensure_request_id(),
        ip_address=client_ip(),
        user_agent=client_user_agent(),
    )
    return AuthService(
        token_codec=get_token_codec(),
        notifier=get_notifier(),
        settings=AuthSettings.from_config(current_app.config),
        ctx=ctx,
    )


def translate_service_errors(func: F) -> F:
    """Re-raise service-layer errors as API errors for the JSON handlers."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        try:
            return func(*args, **kwargs)
        except ServiceError as exc:
            raise BaseService().translate_exceptions(exc) from exc

    return wrapper  # type: ignore[return-value]


def require_auth(func: F) -> F:
    """Ensure the request carries a valid JWT access token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_user_id() -> int:
    """Numeric user id (``uid`` claim) of the verified access token."""
    uid = (get_jwt() or {}).get("uid")
    if uid is None:
        raise Unauthorized("Access token has no user id", code="invalid_token")
    return int(uid)


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
