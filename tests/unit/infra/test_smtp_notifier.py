"""Unit tests for the SMTP notifier adapter."""

from __future__ import annotations

import logging
import smtplib

import pytest

from griya_auth.infra.mail.smtp_notifier import SMTPNotifier, redact_email


class FakeSMTP:
    """Minimal smtplib.SMTP replacement recording what would be sent."""

    instances: list[FakeSMTP] = []
    fail_with: Exception | None = None

    def __init__(self, host, port, timeout=None, context=None):
        self.host = host
        self.port = port
        self.started_tls = False
        self.logged_in: tuple[str, str] | None = None
        self.messages: list[tuple[str, list[str], str]] = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self, context=None):
        self.started_tls = True

    def login(self, user, password):
        self.logged_in = (user, password)

    def sendmail(self, from_addr, to_addrs, msg):
        if FakeSMTP.fail_with is not None:
            raise FakeSMTP.fail_with
        self.messages.append((from_addr, to_addrs, msg))


@pytest.fixture()
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.fail_with = None
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


def _configured(**overrides) -> SMTPNotifier:
    params = dict(
        smtp_host="smtp.example.com",
        smtp_port=587,
        smtp_user="mailer",
        smtp_password="hunter2",
        from_email="no-reply@example.com",
        base_url="https://app.example.com/",
    )
    params.update(overrides)
    return SMTPNotifier(**params)


class TestSMTPNotifier:
    def test_redact_email(self):
        assert redact_email("alice@example.com") == "al***@example.com"
        assert redact_email("not-an-email") == "redacted"

    def test_unconfigured_logs_instead_of_sending(self, fake_smtp, caplog):
        notifier = SMTPNotifier(smtp_host=None)

        with caplog.at_level(logging.INFO, logger="griya_auth.infra.mail.smtp_notifier"):
            notifier.send_verification_email("alice@example.com", "tok123")

        assert fake_smtp.instances == []
        text = caplog.text
        assert "al***@example.com" in text
        assert "alice@example.com" not in text
        assert "tok123" not in text

    def test_verification_email_contains_link(self, fake_smtp):
        _configured().send_verification_email("bob@example.com", "abc123")

        server = fake_smtp.instances[0]
        assert server.started_tls is True
        assert server.logged_in == ("mailer", "hunter2")
        from_addr, to_addrs, body = server.messages[0]
        assert from_addr == "no-reply@example.com"
        assert to_addrs == ["bob@example.com"]
        assert "https://app.example.com/verify-email?token=abc123" in body

    def test_reset_email_mentions_ttl(self, fake_smtp):
        _configured().send_password_reset_email("bob@example.com", "r3set", 15)

        body = fake_smtp.instances[0].messages[0][2]
        assert "https://app.example.com/reset-password?token=r3set" in body
        assert "15 minutes" in body

    def test_delivery_failure_is_logged_not_raised(self, fake_smtp, caplog):
        fake_smtp.fail_with = smtplib.SMTPServerDisconnected("gone")

        with caplog.at_level(logging.ERROR, logger="griya_auth.infra.mail.smtp_notifier"):
            _configured().send_verification_email("carol@example.com", "t")

        assert "delivery" in caplog.text
        assert "ca***@example.com" in caplog.text

    def test_from_config(self):
        notifier = SMTPNotifier.from_config(
            {
                "MAIL_SMTP_HOST": "relay.local",
                "MAIL_SMTP_PORT": "2525",
                "MAIL_FROM": "auth@griya.local",
                "APP_PUBLIC_URL": "https://griya.local",
            }
        )
        assert notifier.is_configured
        assert notifier.smtp_port == 2525
        assert notifier.base_url == "https://griya.local"
