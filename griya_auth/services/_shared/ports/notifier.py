from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Protocol


class Notifier(Protocol):
    """Outbound notification port (emails carrying raw one-time tokens).

    Adapters own delivery and its failures: they log and return, the auth
    flows never retry.
    """

    def send_verification_email(self, email: str, raw_token: str) -> None: ...

    def send_password_reset_email(self, email: str, raw_token: str, ttl_minutes: int) -> None: ...


@dataclass(frozen=True)
class SentMessage:
    """Record of a message handed to :class:`InMemoryNotifier`."""

    kind: str
    email: str
    raw_token: str
    ttl_minutes: int | None = None


class InMemoryNotifier(Notifier):
    """Thread-safe notifier that only records what it was asked to send."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sent: list[SentMessage] = []

    def send_verification_email(self, email: str, raw_token: str) -> None:
        with self._lock:
            self._sent.append(SentMessage("verification", email, raw_token))

    def send_password_reset_email(self, email: str, raw_token: str, ttl_minutes: int) -> None:
        with self._lock:
            self._sent.append(SentMessage("password_reset", email, raw_token, ttl_minutes))

    @property
    def sent(self) -> list[SentMessage]:
        with self._lock:
            return list(self._sent)

    def last(self, kind: str | None = None) -> SentMessage | None:
        """Return the newest message, optionally of a given ``kind``."""
        with self._lock:
            for msg in reversed(self._sent):
                if kind is None or msg.kind == kind:
                    return msg
        return None

    def clear(self) -> None:
        with self._lock:
            self._sent.clear()
