"""WSGI proxy middleware configuration helper."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Trust one upstream hop for ``X-Forwarded-*`` when ``USE_PROXYFIX`` is on.

    Sessions record ``request.remote_addr`` as the client IP, so behind a load
    balancer this must be enabled or every session logs the balancer address.
    """
    if app.config.get("USE_PROXYFIX", True):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)  # type: ignore[method-assign]
