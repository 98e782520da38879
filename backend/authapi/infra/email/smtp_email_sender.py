"""SMTP delivery for verification and password-reset emails."""

from __future__ import annotations

import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from urllib.parse import urlencode

log = logging.getLogger(__name__)


def redact_email(email: str) -> str:
    """Redact an email address for logging (``jo***@example.com``)."""
    if "@" not in email:
        return "redacted"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"


class SMTPEmailSender:
    """
    Transactional email sender.

    When ``smtp_host`` is not set the sender runs in *log-only* mode: messages
    are logged (recipient redacted) and never leave the process. Delivery
    errors propagate; callers decide whether they are fatal.

    :param smtp_host: SMTP server host, or ``None`` for log-only mode.
    :param smtp_port: SMTP server port.
    :param smtp_user: Optional login user.
    :param smtp_password: Optional login password.
    :param use_tls: ``STARTTLS`` on a plain connection when ``True``;
        implicit TLS (``SMTP_SSL``) otherwise.
    :param from_email: Envelope sender; defaults to ``smtp_user``.
    :param app_url: Public base URL used to build links.
    :param timeout: Socket timeout in seconds.
    """

    def __init__(
        self,
        *,
        smtp_host: str | None = None,
        smtp_port: int = 587,
        smtp_user: str | None = None,
        smtp_password: str | None = None,
        use_tls: bool = True,
        from_email: str | None = None,
        app_url: str = "http://localhost:3000",
        timeout: float = 30.0,
    ) -> None:
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.use_tls = use_tls
        self.from_email = from_email or smtp_user or "noreply@localhost"
        self.app_url = app_url.rstrip("/")
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.smtp_host)

    # ------------------------------------------------------------------ #
    # Messages
    # ------------------------------------------------------------------ #

    def send_verification_email(self, to_email: str, token: str) -> None:
        link = f"{self.app_url}/verify-email?{urlencode({'token': token})}"
        text_body = (
            "Welcome!\n\n"
            f"Confirm your email address by opening this link:\n{link}\n\n"
            "If you did not create an account, ignore this message."
        )
        html_body = (
            "<p>Welcome!</p>"
            f'<p>Confirm your email address: <a href="{link}">verify email</a></p>'
            "<p>If you did not create an account, ignore this message.</p>"
        )
        self._send(to_email, "Verify your email address", html_body, text_body)

    def send_password_reset_email(self, to_email: str, token: str) -> None:
        link = f"{self.app_url}/reset-password?{urlencode({'token': token})}"
        text_body = (
            "A password reset was requested for your account.\n\n"
            f"Choose a new password here:\n{link}\n\n"
            "If you did not request it, ignore this message."
        )
        html_body = (
            "<p>A password reset was requested for your account.</p>"
            f'<p><a href="{link}">Choose a new password</a></p>'
            "<p>If you did not request it, ignore this message.</p>"
        )
        self._send(to_email, "Reset your password", html_body, text_body)

    # ------------------------------------------------------------------ #
    # Transport
    # ------------------------------------------------------------------ #

    def _send(self, to_email: str, subject: str, html_body: str, text_body: str) -> None:
        if not self.is_configured:
            log.info(
                "email.log_only to=%s subject=%s preview=%s",
                redact_email(to_email),
                subject,
                text_body[:200],
            )
            return

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_email
        msg["To"] = to_email
        msg.attach(MIMEText(text_body, "plain"))
        msg.attach(MIMEText(html_body, "html"))

        context = ssl.create_default_context()
        log.debug(
            "email.connecting host=%s port=%s tls=%s",
            self.smtp_host,
            self.smtp_port,
            self.use_tls,
        )
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
        log.info("email.sent to=%s subject=%s", redact_email(to_email), subject)

    def _login(self, server: smtplib.SMTP) -> None:
        if self.smtp_user and self.smtp_password:
            server.login(self.smtp_user, self.smtp_password)
