"""Run summary email composition and SMTP sending service."""

from __future__ import annotations

import logging
import smtplib
from collections.abc import Mapping
from dataclasses import dataclass, field
from email.message import EmailMessage
from email.utils import make_msgid
from html import escape
from pathlib import Path
from typing import Protocol

from simple_api_tester.configuration import ConfigKey, ConfigRegistry
from simple_api_tester.harness_errors import ErrorKind, HarnessError
from simple_api_tester.reporting import CaseStatus, ReportMetadata, ReportPaths

from .delivery_outcomes import EmailSendResult

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "API Test Execution Report"
SUBJECT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class SMTPSettings:  # pylint: disable=too-many-instance-attributes
    """SMTP connection settings for the summary email."""

    host: str
    port: int
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    use_ssl: bool = False
    use_starttls: bool = True
    timeout_seconds: int = 30


@dataclass(frozen=True)
class MailSettings:
    sender: str
    to: tuple[str, ...]
    cc: tuple[str, ...] = ()
    subject: str = DEFAULT_SUBJECT


def email_settings_from_registry(registry: ConfigRegistry) -> tuple[SMTPSettings, MailSettings]:
    """Read the email keys; host and port are required once sending is enabled."""
    port_text = registry.get(ConfigKey.EMAIL_PORT)
    try:
        port = int(port_text)
    except ValueError as exc:
        raise HarnessError(ErrorKind.MISSING_CONFIG, "email_port must be an integer.") from exc
    use_ssl = registry.optional_flag(ConfigKey.EMAIL_USE_SSL)
    username = registry.find(ConfigKey.EMAIL_USERNAME)
    smtp = SMTPSettings(
        host=registry.get(ConfigKey.EMAIL_HOST),
        port=port,
        username=username,
        password=registry.find(ConfigKey.EMAIL_PASSWORD),
        use_ssl=use_ssl,
        use_starttls=not use_ssl,
    )
    mail = MailSettings(
        sender=registry.find(ConfigKey.EMAIL_FROM) or username or "",
        to=split_recipients(registry.find(ConfigKey.EMAIL_TO_RECIPIENTS)),
        cc=split_recipients(registry.find(ConfigKey.EMAIL_CC_RECIPIENTS)),
        subject=registry.find(ConfigKey.EMAIL_SUBJECT) or DEFAULT_SUBJECT,
    )
    return smtp, mail


def split_recipients(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(address.strip() for address in raw.split(",") if address.strip())


class SMTPClient(Protocol):  # pylint: disable=too-few-public-methods
    """Protocol for SMTP clients used by the mailer."""

    def send_message(self, settings: SMTPSettings, message: EmailMessage) -> None: ...


class SynchronousSMTPClient:  # pylint: disable=too-few-public-methods
    """Real SMTP client implementation using smtplib."""

    def send_message(self, settings: SMTPSettings, message: EmailMessage) -> None:
        recipients = _collect_recipients(message)
        smtp: smtplib.SMTP
        if settings.use_ssl:
            smtp = smtplib.SMTP_SSL(settings.host, settings.port, timeout=settings.timeout_seconds)
        else:
            smtp = smtplib.SMTP(settings.host, settings.port, timeout=settings.timeout_seconds)
        try:
            smtp.ehlo()
            if settings.use_starttls and not settings.use_ssl:
                smtp.starttls()
                smtp.ehlo()
            if settings.username and settings.password:
                smtp.login(settings.username, settings.password)
            smtp.send_message(message, to_addrs=recipients)
        finally:
            smtp.quit()


def compose_summary_email(
    mail_settings: MailSettings,
    metadata: ReportMetadata,
    counts: Mapping[CaseStatus, int],
    report_paths: ReportPaths,
) -> EmailMessage:
    """Build the summary message with the main HTML report attached."""
    message = EmailMessage()
    message["Message-ID"] = make_msgid()
    message["From"] = mail_settings.sender
    message["To"] = ", ".join(mail_settings.to)
    if mail_settings.cc:
        message["Cc"] = ", ".join(mail_settings.cc)
    message["Subject"] = (
        f"{mail_settings.subject} - {metadata.started.strftime(SUBJECT_TIMESTAMP_FORMAT)}"
    )

    rows = [
        ("Service", metadata.service),
        ("Run-manager", metadata.run_manager),
        ("Environment", metadata.environment),
        ("Passed", str(counts.get(CaseStatus.PASS, 0))),
        ("Failed", str(counts.get(CaseStatus.FAIL, 0))),
        ("Skipped", str(counts.get(CaseStatus.SKIP, 0))),
    ]
    message.set_content("\n".join(f"{label}: {value}" for label, value in rows))
    message.add_alternative(_render_html_body(rows), subtype="html")

    report = Path(report_paths.main_report)
    message.add_attachment(
        report.read_bytes(), maintype="text", subtype="html", filename=report.name
    )
    return message


class ReportSummaryMailer:  # pylint: disable=too-few-public-methods
    """Sends the run summary through an SMTP client."""

    def __init__(self, smtp_client: SMTPClient) -> None:
        self._smtp_client = smtp_client

    def send(
        self,
        smtp_settings: SMTPSettings,
        mail_settings: MailSettings,
        metadata: ReportMetadata,
        counts: Mapping[CaseStatus, int],
        report_paths: ReportPaths,
    ) -> EmailSendResult:
        if not mail_settings.to:
            logger.warning("Summary email not sent: email_to_recipients is empty.")
            return EmailSendResult.skipped("no recipients")
        try:
            message = compose_summary_email(mail_settings, metadata, counts, report_paths)
            self._smtp_client.send_message(smtp_settings, message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Summary email could not be sent: %s", exc)
            return EmailSendResult.failed(exc)
        logger.info("Summary email sent to %s", ", ".join(mail_settings.to + mail_settings.cc))
        return EmailSendResult.sent()


def _render_html_body(rows: list[tuple[str, str]]) -> str:
    cells = "".join(
        f"<tr><th align='left'>{escape(label)}</th><td>{escape(value)}</td></tr>"
        for label, value in rows
    )
    return (
        "<html><body><h2>API Test Execution Summary</h2>"
        f"<table>{cells}</table><p>The full report is attached.</p></body></html>"
    )


def _collect_recipients(message: EmailMessage) -> list[str]:
    recipients = []
    for header in ("To", "Cc", "Bcc"):
        if header in message:
            recipients.extend(
                [address.strip() for address in message[header].split(",") if address.strip()]
            )
    return recipients
