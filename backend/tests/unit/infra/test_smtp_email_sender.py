"""Unit tests for SMTPEmailSender."""

from __future__ import annotations

import logging

import pytest
from authapi.infra.email import smtp_email_sender
from authapi.infra.email.smtp_email_sender import SMTPEmailSender, redact_email


class FakeSMTP:
    """Records what a real SMTP connection would have been asked to do."""

    instances: list[FakeSMTP] = []

    def __init__(self, host, port, timeout=None, context=None):
        self.host, self.port = host, port
        self.started_tls = False
        self.logged_in = None
        self.sent = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self, context=None):
        self.started_tls = True

    def login(self, user, password):
        self.logged_in = (user, password)

    def sendmail(self, sender, recipients, message):
        self.sent.append((sender, recipients, message))


@pytest.fixture(autouse=True)
def _fake_smtp(monkeypatch):
    FakeSMTP.instances.clear()
    monkeypatch.setattr(smtp_email_sender.smtplib, "SMTP", FakeSMTP)
    monkeypatch.setattr(smtp_email_sender.smtplib, "SMTP_SSL", FakeSMTP)


def test_redact_email():
    assert redact_email("john@example.com") == "jo***@example.com"
    assert redact_email("nope") == "redacted"


def test_log_only_mode_sends_nothing(caplog):
    sender = SMTPEmailSender(smtp_host=None)

    with caplog.at_level(logging.INFO, logger=smtp_email_sender.__name__):
        sender.send_verification_email("john@example.com", "tok")

    assert FakeSMTP.instances == []
    assert "jo***@example.com" in caplog.text
    assert "john@example.com" not in caplog.text


def test_verification_email_over_starttls():
    sender = SMTPEmailSender(
        smtp_host="smtp.test",
        smtp_port=587,
        smtp_user="mailer",
        smtp_password="pw",
        from_email="noreply@test",
        app_url="https://app.test/",
    )

    sender.send_verification_email("ann@example.com", "abc123")

    (conn,) = FakeSMTP.instances
    assert conn.started_tls
    assert conn.logged_in == ("mailer", "pw")
    from_addr, to_addrs, message = conn.sent[0]
    assert from_addr == "noreply@test"
    assert to_addrs == ["ann@example.com"]
    assert "https://app.test/verify-email?token=abc123" in message


def test_reset_email_over_implicit_tls():
    sender = SMTPEmailSender(smtp_host="smtp.test", smtp_port=465, use_tls=False)

    sender.send_password_reset_email("ann@example.com", "r3set")

    (conn,) = FakeSMTP.instances
    assert not conn.started_tls
    assert conn.logged_in is None
    assert "/reset-password?token=r3set" in conn.sent[0][2]
