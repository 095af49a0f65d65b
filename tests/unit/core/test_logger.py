"""Unit tests for the logging utility."""

from __future__ import annotations

import json
import logging

import pytest

from griya_auth.core.logger import JSONFormatter, configure_logging


@pytest.fixture()
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.usefixtures("_restore_root_logger")
def test_configure_logging_sets_level() -> None:
    """``configure_logging`` should set the root logger level."""

    configure_logging("DEBUG")

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JSONFormatter)


def test_json_formatter_promotes_extras() -> None:
    record = logging.LogRecord("griya_auth.test", logging.INFO, __file__, 1, "Login failed", None, None)
    record.user_id = 12
    record.reason = "bad_password"
    record.request_id = "req-1"

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "Login failed"
    assert payload["level"] == "INFO"
    assert payload["user_id"] == 12
    assert payload["reason"] == "bad_password"
    assert payload["request_id"] == "req-1"


def test_request_id_echoed_in_response(client) -> None:
    resp = client.get("/api/v1/health", headers={"X-Request-ID": "abc-123"})

    assert resp.headers["X-Request-ID"] == "abc-123"


def test_request_id_generated_when_missing(client) -> None:
    resp = client.get("/api/v1/health")

    assert resp.headers.get("X-Request-ID")


def test_request_id_not_reused_across_requests(app, client) -> None:
    """Requests sharing one pushed app context still get their own id."""
    with app.app_context():
        first = client.get("/api/v1/health", headers={"X-Request-ID": "first-id"})
        second = client.get("/api/v1/health", headers={"X-Request-ID": "second-id"})
        third = client.get("/api/v1/health")

    assert first.headers["X-Request-ID"] == "first-id"
    assert second.headers["X-Request-ID"] == "second-id"
    assert third.headers["X-Request-ID"] not in {"first-id", "second-id"}
