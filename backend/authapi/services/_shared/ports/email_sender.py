from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


class EmailSender(Protocol):
    """
    Outbound transactional email.

    Implementations may raise on delivery failure; the auth service treats
    every send as best-effort and only logs failures.
    """

    def send_verification_email(self, to_email: str, token: str) -> None: ...
    def send_password_reset_email(self, to_email: str, token: str) -> None: ...


@dataclass(frozen=True, slots=True)
class SentEmail:
    """Message captured by :class:`InMemoryEmailSender`."""

    kind: str
    to_email: str
    token: str


class InMemoryEmailSender(EmailSender):
    """Collect messages in an outbox instead of delivering them."""

    def __init__(self, *, fail: bool = False) -> None:
        self.outbox: list[SentEmail] = []
        self.fail = fail

    def send_verification_email(self, to_email: str, token: str) -> None:
        self._record("verification", to_email, token)

    def send_password_reset_email(self, to_email: str, token: str) -> None:
        self._record("password_reset", to_email, token)

    def last_token(self, kind: str) -> str | None:
        """Return the token of the most recent message of ``kind``."""
        for message in reversed(self.outbox):
            if message.kind == kind:
                return message.token
        return None

    def _record(self, kind: str, to_email: str, token: str) -> None:
        if self.fail:
            raise ConnectionError("Email delivery unavailable")
        self.outbox.append(SentEmail(kind=kind, to_email=to_email, token=token))
