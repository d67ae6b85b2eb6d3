from .email import (
    EmailDeliveryError,
    EmailSender,
    LoggingEmailSender,
    SmtpEmailSender,
    UnconfiguredEmailSender,
    get_email_sender,
)
from .templates import build_deadline_email, urgency_severity, urgency_text

__all__ = [
    "EmailDeliveryError",
    "EmailSender",
    "LoggingEmailSender",
    "SmtpEmailSender",
    "UnconfiguredEmailSender",
    "get_email_sender",
    "build_deadline_email",
    "urgency_severity",
    "urgency_text",
]
