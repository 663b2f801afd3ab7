"""Summary mailer tests."""

from __future__ import annotations

import smtplib
from datetime import datetime
from email.message import EmailMessage
from pathlib import Path

import pytest
from simple_api_tester.configuration import ConfigRegistry
from simple_api_tester.email_summary import (
    MailSettings,
    ReportSummaryMailer,
    SendStatus,
    SMTPSettings,
    compose_summary_email,
    email_settings_from_registry,
    split_recipients,
)
from simple_api_tester.harness_errors import HarnessError
from simple_api_tester.reporting import CaseStatus, ReportMetadata, ReportPaths


class _RecordingSMTPClient:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.messages: list[tuple[SMTPSettings, EmailMessage]] = []

    def send_message(self, settings: SMTPSettings, message: EmailMessage) -> None:
        if self.error is not None:
            raise self.error
        self.messages.append((settings, message))


def _report_paths(tmp_path: Path) -> ReportPaths:
    main_report = tmp_path / "Patients_Smoke.html"
    main_report.write_text("<html>report</html>", encoding="utf-8")
    return ReportPaths(main_report=main_report, failed_report=tmp_path / "failed.html")


def _metadata() -> ReportMetadata:
    return ReportMetadata(
        service="Patients",
        run_manager="Smoke",
        environment="QA",
        started=datetime(2024, 5, 1, 10, 30, 15),
    )


_COUNTS = {CaseStatus.PASS: 3, CaseStatus.FAIL: 1, CaseStatus.SKIP: 0}


def test_settings_are_read_from_registry() -> None:
    smtp, mail = email_settings_from_registry(
        ConfigRegistry(
            {
                "email_host": "smtp.example",
                "email_port": "465",
                "email_use_ssl": "yes",
                "email_username": "bot@example.com",
                "email_password": "pw",
                "email_to_recipients": "a@example.com, b@example.com,",
                "email_cc_recipients": "",
            }
        )
    )

    assert smtp.host == "smtp.example"
    assert smtp.port == 465
    assert smtp.use_ssl is True
    assert smtp.use_starttls is False
    assert mail.sender == "bot@example.com"
    assert mail.to == ("a@example.com", "b@example.com")
    assert mail.cc == ()
    assert mail.subject == "API Test Execution Report"


def test_invalid_port_is_a_configuration_error() -> None:
    with pytest.raises(HarnessError):
        email_settings_from_registry(ConfigRegistry({"email_host": "h", "email_port": "smtp"}))


def test_summary_email_has_counts_and_report_attachment(tmp_path: Path) -> None:
    mail = MailSettings(sender="qa@example.com", to=("lead@example.com",), cc=("ops@example.com",))

    message = compose_summary_email(mail, _metadata(), _COUNTS, _report_paths(tmp_path))

    assert message["Subject"] == "API Test Execution Report - 2024-05-01 10:30:15"
    assert message["Cc"] == "ops@example.com"
    text_body = message.get_body(preferencelist=("plain",))
    assert text_body is not None
    assert "Passed: 3" in text_body.get_content()
    attachments = list(message.iter_attachments())
    assert [part.get_filename() for part in attachments] == ["Patients_Smoke.html"]


def test_mailer_sends_through_client(tmp_path: Path) -> None:
    client = _RecordingSMTPClient()
    settings = SMTPSettings(host="smtp.example", port=25)
    mail = MailSettings(sender="qa@example.com", to=("lead@example.com",))

    result = ReportSummaryMailer(client).send(
        settings, mail, _metadata(), _COUNTS, _report_paths(tmp_path)
    )

    assert result.status is SendStatus.SENT
    assert result.sent_at is not None
    assert client.messages[0][0] is settings


def test_mailer_reports_smtp_failures(tmp_path: Path) -> None:
    client = _RecordingSMTPClient(error=smtplib.SMTPAuthenticationError(535, b"bad credentials"))
    mail = MailSettings(sender="qa@example.com", to=("lead@example.com",))

    result = ReportSummaryMailer(client).send(
        SMTPSettings(host="smtp.example", port=25), mail, _metadata(), _COUNTS, _report_paths(tmp_path)
    )

    assert result.status is SendStatus.FAILED
    assert result.error_message is not None


def test_mailer_skips_without_recipients(tmp_path: Path) -> None:
    client = _RecordingSMTPClient()

    result = ReportSummaryMailer(client).send(
        SMTPSettings(host="smtp.example", port=25),
        MailSettings(sender="qa@example.com", to=()),
        _metadata(),
        _COUNTS,
        _report_paths(tmp_path),
    )

    assert result.status is SendStatus.SKIPPED
    assert client.messages == []
    assert split_recipients(None) == ()
