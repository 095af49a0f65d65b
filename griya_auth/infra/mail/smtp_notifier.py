from __future__ import annotations

import logging
import smtplib
import ssl
from collections.abc import Mapping
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import Any
from urllib.parse import urlencode

from jinja2 import Environment, FileSystemLoader, select_autoescape

from griya_auth.services._shared.ports import Notifier

log = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"


def redact_email(email: str) -> str:
    """Keep the first two characters of the local part and the domain."""
    if "@" not in email:
        return "redacted"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"


class SMTPNotifier(Notifier):
    """
    Send verification and password-reset emails over SMTP.

    Bodies are rendered from the Jinja2 templates next to this module. When
    no SMTP host is configured the message is logged (recipient redacted)
    instead of sent. Delivery errors are logged and swallowed; the calling
    flow has already committed its token and never retries.
    """

    def __init__(
        self,
        *,
        smtp_host: str | None = None,
        smtp_port: int = 587,
        smtp_user: str | None = None,
        smtp_password: str | None = None,
        use_tls: bool = True,
        from_email: str = "no-reply@griya.local",
        base_url: str = "http://localhost:5173",
        template_dir: Path = _TEMPLATE_DIR,
        timeout: float = 30.0,
    ) -> None:
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.use_tls = use_tls
        self.from_email = from_email
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._jinja = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html", "xml"]),
        )

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> SMTPNotifier:
        return cls(
            smtp_host=config.get("MAIL_SMTP_HOST"),
            smtp_port=int(config.get("MAIL_SMTP_PORT", 587)),
            smtp_user=config.get("MAIL_SMTP_USER"),
            smtp_password=config.get("MAIL_SMTP_PASSWORD"),
            use_tls=bool(config.get("MAIL_USE_TLS", True)),
            from_email=str(config.get("MAIL_FROM", "no-reply@griya.local")),
            base_url=str(config.get("APP_PUBLIC_URL", "http://localhost:5173")),
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.smtp_host and self.from_email)

    # ------------------------------------------------------------------ #
    # Notifier port
    # ------------------------------------------------------------------ #

    def send_verification_email(self, email: str, raw_token: str) -> None:
        link = f"{self.base_url}/verify-email?{urlencode({'token': raw_token})}"
        html = self._jinja.get_template("verify_email.html").render(link=link)
        text = f"Confirm your email address by opening this link:\n{link}\n"
        self._send(email, "Verify your email address", html, text)

    def send_password_reset_email(self, email: str, raw_token: str, ttl_minutes: int) -> None:
        link = f"{self.base_url}/reset-password?{urlencode({'token': raw_token})}"
        html = self._jinja.get_template("reset_password.html").render(
            link=link, ttl_minutes=ttl_minutes
        )
        text = (
            f"Reset your password with this link (valid for {ttl_minutes} minutes):\n{link}\n"
            "If you did not request a reset, ignore this email.\n"
        )
        self._send(email, "Reset your password", html, text)

    # ------------------------------------------------------------------ #
    # Transport
    # ------------------------------------------------------------------ #

    def _build_message(self, to_email: str, subject: str, html: str, text: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_email
        msg["To"] = to_email
        msg.attach(MIMEText(text, "plain"))
        msg.attach(MIMEText(html, "html"))
        return msg

    def _send(self, to_email: str, subject: str, html: str, text: str) -> bool:
        """Deliver one message. Returns ``False`` when delivery failed."""
        if not self.is_configured:
            log.info("Mail transport not configured; email to %s not sent: %s",
                     redact_email(to_email), subject)
            return True

        msg = self._build_message(to_email, subject, html, text)
        context = ssl.create_default_context()
        try:
            if self.use_tls:
                with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
                    server.starttls(context=context)
                    self._login(server)
                    server.sendmail(self.from_email, [to_email], msg.as_string())
            else:
                with smtplib.SMTP_SSL(
                    self.smtp_host, self.smtp_port, context=context, timeout=self.timeout
                ) as server:
                    self._login(server)
                    server.sendmail(self.from_email, [to_email], msg.as_string())
        except (smtplib.SMTPException, ssl.SSLError, OSError):
            log.error("Email delivery to %s failed", redact_email(to_email), exc_info=True)
            return False

        log.info("Email sent to %s: %s", redact_email(to_email), subject)
        return True

    def _login(self, server: smtplib.SMTP) -> None:
        if self.smtp_user and self.smtp_password:
            server.login(self.smtp_user, self.smtp_password)
