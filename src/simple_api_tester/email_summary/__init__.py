"""Summary email domain exports."""

from .delivery_outcomes import EmailSendResult, SendStatus
from .summary_mailer import (
    MailSettings,
    ReportSummaryMailer,
    SMTPClient,
    SMTPSettings,
    SynchronousSMTPClient,
    compose_summary_email,
    email_settings_from_registry,
    split_recipients,
)

__all__ = [
    "SendStatus",
    "EmailSendResult",
    "SMTPSettings",
    "MailSettings",
    "SMTPClient",
    "SynchronousSMTPClient",
    "ReportSummaryMailer",
    "compose_summary_email",
    "email_settings_from_registry",
    "split_recipients",
]
