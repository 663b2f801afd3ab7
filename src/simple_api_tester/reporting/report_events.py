"""Report event entities."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from simple_api_tester.case_registry import TestCaseDescriptor


class EventKind(str, Enum):
    """Tags of the report event stream."""

    SUITE_START = "suite_start"
    SUITE_END = "suite_end"
    CASE_START = "case_start"
    CASE_END = "case_end"
    STEP = "step"
    REQUEST_LOG = "request_log"
    RESPONSE_LOG = "response_log"


class StepLevel(str, Enum):
    """Severity of one step inside a case node."""

    PASS = "pass"
    FAIL = "fail"
    SKIP = "skip"
    INFO = "info"
    WARN = "warn"
    DEBUG = "debug"
    REQUEST = "request"
    RESPONSE = "response"


class CaseStatus(str, Enum):
    """Terminal status of one attempt."""

    PASS = "pass"
    FAIL = "fail"
    SKIP = "skip"


@dataclass(frozen=True)
class StepStyle:
    log_level: int
    css_class: str
    label: str


STEP_STYLES: dict[StepLevel, StepStyle] = {
    StepLevel.PASS: StepStyle(logging.INFO, "pass", "Pass"),
    StepLevel.FAIL: StepStyle(logging.ERROR, "fail", "Fail"),
    StepLevel.SKIP: StepStyle(logging.INFO, "skip", "Skip"),
    StepLevel.INFO: StepStyle(logging.INFO, "info", "Info"),
    StepLevel.WARN: StepStyle(logging.WARNING, "warn", "Warning"),
    StepLevel.DEBUG: StepStyle(logging.DEBUG, "debug", "Debug"),
    StepLevel.REQUEST: StepStyle(logging.DEBUG, "request", "Request"),
    StepLevel.RESPONSE: StepStyle(logging.DEBUG, "response", "Response"),
}


@dataclass(frozen=True)
class ReportEvent:
    """One entry of a case node or of the suite stream."""

    kind: EventKind
    timestamp: datetime
    message: str = ""
    level: StepLevel | None = None
    detail: str | None = None
    status: CaseStatus | None = None

    @property
    def style(self) -> StepStyle | None:
        return STEP_STYLES.get(self.level) if self.level else None


@dataclass
class CaseNode:  # pylint: disable=too-many-instance-attributes
    """Events of one attempt of one case, written by a single handle."""

    descriptor: TestCaseDescriptor
    attempt: int
    handle_id: int
    started_at: datetime
    invocation: int = 1
    events: list[ReportEvent] = field(default_factory=list)
    status: CaseStatus | None = None
    error: str | None = None
    will_retry: bool = False
    ended_at: datetime | None = None
    row: dict[str, Any] = field(default_factory=dict)

    @property
    def is_final(self) -> bool:
        """Whether this attempt decides the case outcome (no retry follows it)."""
        return self.status is not None and not self.will_retry

    @property
    def duration_ms(self) -> int:
        if self.ended_at is None:
            return 0
        return int((self.ended_at - self.started_at).total_seconds() * 1000)

    @property
    def steps(self) -> list[ReportEvent]:
        return [event for event in self.events if event.level is not None]
