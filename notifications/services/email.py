"""Email transports used for outbound notifications.

The SMTP sender talks to the configured relay; the logging sender is used in
dev mode and for dry runs, and only writes the message to the log. Without a
relay outside dev mode every send raises ``EmailDeliveryError``.
"""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import List, Protocol

from notifications.models.notification import OutboundEmail
from utils.app_settings import Settings, load_settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(RuntimeError):
    """Raised when a message could not be handed to the mail transport."""

    def __init__(self, to: str, reason: str):
        super().__init__(f"Email to {to} failed: {reason}")
        self.to = to
        self.reason = reason


class EmailSender(Protocol):
    """Protocol describing an email transport."""

    def send(self, message: OutboundEmail) -> None:
        ...


class SmtpEmailSender:
    def __init__(self, settings: Settings, *, timeout: float = 30.0) -> None:
        if not settings.smtp_host:
            raise ValueError("SMTP host is not configured (BZR_SMTP_HOST)")
        self.settings = settings
        self.timeout = timeout

    def _build(self, message: OutboundEmail) -> EmailMessage:
        mail = EmailMessage()
        mail["From"] = self.settings.email_from
        mail["To"] = message.to
        mail["Subject"] = message.subject
        mail.set_content(message.body)
        return mail

    def send(self, message: OutboundEmail) -> None:
        mail = self._build(message)
        try:
            with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=self.timeout) as smtp:
                if self.settings.smtp_starttls:
                    smtp.starttls()
                if self.settings.smtp_user:
                    smtp.login(self.settings.smtp_user, self.settings.smtp_password or "")
                smtp.send_message(mail)
        except (smtplib.SMTPException, OSError) as exc:
            raise EmailDeliveryError(message.to, str(exc)) from exc
        logger.info("Email sent to %s: %s", message.to, message.subject)


class LoggingEmailSender:
    """Sender that records messages in memory and the log instead of mailing."""

    def __init__(self) -> None:
        self.sent: List[OutboundEmail] = []

    def send(self, message: OutboundEmail) -> None:
        self.sent.append(message)
        logger.info("[dry-run] email to %s: %s", message.to, message.subject)


class UnconfiguredEmailSender:
    """Sender used when no SMTP host is set outside dev mode; every send fails."""

    reason = "SMTP host is not configured (BZR_SMTP_HOST)"

    def send(self, message: OutboundEmail) -> None:
        raise EmailDeliveryError(message.to, self.reason)


def get_email_sender(settings: Settings | None = None, *, dry_run: bool = False) -> EmailSender:
    settings = settings or load_settings()
    if dry_run or settings.dev_mode:
        return LoggingEmailSender()
    if not settings.smtp_host:
        logger.error("No SMTP host configured; notification emails will fail")
        return UnconfiguredEmailSender()
    return SmtpEmailSender(settings)


__all__ = [
    "EmailDeliveryError",
    "EmailSender",
    "LoggingEmailSender",
    "SmtpEmailSender",
    "UnconfiguredEmailSender",
    "get_email_sender",
]
