"""Thread-safe report event sink."""

from __future__ import annotations

import itertools
import json
import logging
import threading
import traceback
from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from simple_api_tester.case_registry import TestCaseDescriptor
from simple_api_tester.harness_errors import ErrorKind, HarnessError

from .report_events import (
    STEP_STYLES,
    CaseNode,
    CaseStatus,
    EventKind,
    ReportEvent,
    StepLevel,
)

if TYPE_CHECKING:
    from simple_api_tester.request_dispatch.request_models import RequestPlan, ResponseRecord

logger = logging.getLogger(__name__)

REDACTED = "********"
_SENSITIVE_HEADERS = {"authorization", "proxy-authorization"}


class _SuiteState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    ENDED = "ended"


def _now() -> datetime:
    return datetime.now().astimezone()


class ReporterSink:
    """Owns the suite stream and multiplexes case events by handle."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handle_ids = itertools.count(1)
        self._handles: list[ReporterHandle] = []
        self._state = _SuiteState.IDLE
        self.suite_name = ""
        self.suite_events: list[ReportEvent] = []

    @property
    def is_running(self) -> bool:
        return self._state is _SuiteState.RUNNING

    def start_suite(self, name: str) -> None:
        with self._lock:
            if self._state is not _SuiteState.IDLE:
                raise HarnessError(ErrorKind.REPORTER, "Suite has already been started.")
            self.suite_name = name
            self._state = _SuiteState.RUNNING
            self.suite_events.append(ReportEvent(EventKind.SUITE_START, _now(), message=name))
        logger.info("Suite '%s' started", name)

    def end_suite(self) -> None:
        with self._lock:
            if self._state is not _SuiteState.RUNNING:
                raise HarnessError(ErrorKind.REPORTER, "Suite is not running.")
            open_cases = [handle for handle in self._handles if handle.current is not None]
            if open_cases:
                names = ", ".join(
                    handle.current.descriptor.method_name
                    for handle in open_cases
                    if handle.current is not None
                )
                raise HarnessError(ErrorKind.REPORTER, f"Cases still running at suite end: {names}")
            self._state = _SuiteState.ENDED
            self.suite_events.append(
                ReportEvent(EventKind.SUITE_END, _now(), message=self.suite_name)
            )
        logger.info("Suite '%s' finished", self.suite_name)

    def open_handle(self) -> ReporterHandle:
        with self._lock:
            handle = ReporterHandle(self, next(self._handle_ids))
            self._handles.append(handle)
        return handle

    def case_nodes(self) -> list[CaseNode]:
        """All case nodes, grouped by handle in creation order."""
        with self._lock:
            handles = list(self._handles)
        return [node for handle in handles for node in handle.nodes]

    def final_nodes(self) -> list[CaseNode]:
        return [node for node in self.case_nodes() if node.is_final]

    def counts(self) -> dict[CaseStatus, int]:
        counts = {status: 0 for status in CaseStatus}
        for node in self.final_nodes():
            if node.status is not None:
                counts[node.status] += 1
        return counts


class ReporterHandle:
    """Event writer owned by exactly one worker thread."""

    def __init__(self, sink: ReporterSink, handle_id: int) -> None:
        self._sink = sink
        self.handle_id = handle_id
        self.nodes: list[CaseNode] = []
        self.current: CaseNode | None = None

    def start_case(
        self,
        descriptor: TestCaseDescriptor,
        attempt: int = 1,
        *,
        invocation: int = 1,
        row: Mapping[str, Any] | None = None,
    ) -> CaseNode:
        if not self._sink.is_running:
            raise HarnessError(
                ErrorKind.REPORTER,
                f"Cannot start case {descriptor.method_name}: suite is not running.",
            )
        if self.current is not None:
            raise HarnessError(
                ErrorKind.REPORTER,
                f"Cannot start case {descriptor.method_name}: "
                f"{self.current.descriptor.method_name} is still running on this handle.",
            )
        started_at = _now()
        node = CaseNode(
            descriptor=descriptor,
            attempt=attempt,
            handle_id=self.handle_id,
            started_at=started_at,
            invocation=invocation,
            row=dict(row or {}),
        )
        node.events.append(
            ReportEvent(EventKind.CASE_START, started_at, message=descriptor.method_name)
        )
        self.nodes.append(node)
        self.current = node
        logger.info("Started %s (attempt %d)", descriptor.method_name, attempt)
        return node

    def end_case(
        self,
        status: CaseStatus,
        error: BaseException | None = None,
        *,
        will_retry: bool = False,
    ) -> CaseNode:
        node = self._require_running("end case")
        ended_at = _now()
        node.status = status
        node.will_retry = will_retry and status is CaseStatus.FAIL
        node.ended_at = ended_at
        if error is not None:
            node.error = str(error)
        node.events.append(
            ReportEvent(
                EventKind.CASE_END,
                ended_at,
                message=node.descriptor.method_name,
                status=status,
                detail=_stack_trace(error) if error is not None else None,
            )
        )
        self.current = None
        logger.info(
            "%s %s%s",
            node.descriptor.method_name,
            status.value.upper(),
            " (will retry)" if node.will_retry else "",
        )
        return node

    def step(self, level: StepLevel, message: str, detail: str | None = None) -> None:
        node = self._require_running("log step")
        kind = {
            StepLevel.REQUEST: EventKind.REQUEST_LOG,
            StepLevel.RESPONSE: EventKind.RESPONSE_LOG,
        }.get(level, EventKind.STEP)
        node.events.append(ReportEvent(kind, _now(), message=message, level=level, detail=detail))
        logger.log(
            STEP_STYLES[level].log_level, "[%s] %s", node.descriptor.method_name, message
        )

    def info(self, message: str) -> None:
        self.step(StepLevel.INFO, message)

    def passed(self, message: str) -> None:
        self.step(StepLevel.PASS, message)

    def failed(self, message: str, error: BaseException | None = None) -> None:
        self.step(StepLevel.FAIL, message, _stack_trace(error) if error is not None else None)

    def skipped(self, message: str) -> None:
        self.step(StepLevel.SKIP, message)

    def warn(self, message: str) -> None:
        self.step(StepLevel.WARN, message)

    def debug(self, message: str) -> None:
        self.step(StepLevel.DEBUG, message)

    def log_request(self, plan: RequestPlan) -> None:
        lines = [f"{plan.method} {plan.url}"]
        if plan.params:
            lines.append(f"Query: {json.dumps(dict(plan.params), default=str)}")
        lines.append(f"Auth: {plan.auth.describe()}")
        lines.extend(f"{name}: {value}" for name, value in redact_headers(plan.headers).items())
        detail = "\n".join(lines)
        if plan.body is not None:
            detail += "\n\n" + _render_body(plan.body)
        self.step(StepLevel.REQUEST, f"Request: {plan.method} {plan.url}", detail)

    def log_response(self, response: ResponseRecord) -> None:
        headers = "\n".join(f"{name}: {value}" for name, value in response.headers.items())
        detail = f"{headers}\n\n{response.text}" if headers else response.text
        self.step(
            StepLevel.RESPONSE,
            f"Response: {response.status_code} ({response.elapsed_ms} ms)",
            detail,
        )

    def _require_running(self, action: str) -> CaseNode:
        if self.current is None:
            raise HarnessError(ErrorKind.REPORTER, f"Cannot {action}: no case is running.")
        return self.current


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    return {
        name: REDACTED if name.lower() in _SENSITIVE_HEADERS else value
        for name, value in headers.items()
    }


def _render_body(body: Any) -> str:
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        return body
    return json.dumps(body, indent=2, ensure_ascii=False, default=str)


def _stack_trace(error: BaseException) -> str:
    return "".join(traceback.format_exception(type(error), error, error.__traceback__)).strip()
