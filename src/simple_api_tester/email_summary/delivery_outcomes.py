"""Summary email delivery entities."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class SendStatus(str, Enum):
    """Summary email sending outcome status."""

    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class EmailSendResult:
    """Outcome of attempting to send the run summary."""

    status: SendStatus
    sent_at: datetime | None
    error_message: str | None

    @staticmethod
    def sent() -> EmailSendResult:
        return EmailSendResult(
            status=SendStatus.SENT,
            sent_at=datetime.now().astimezone(),
            error_message=None,
        )

    @staticmethod
    def failed(error: Exception) -> EmailSendResult:
        return EmailSendResult(status=SendStatus.FAILED, sent_at=None, error_message=str(error))

    @staticmethod
    def skipped(reason: str) -> EmailSendResult:
        return EmailSendResult(status=SendStatus.SKIPPED, sent_at=None, error_message=reason)
