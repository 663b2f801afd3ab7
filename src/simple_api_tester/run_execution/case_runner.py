"""Executes the iterations of one scheduled case."""

from __future__ import annotations

import logging

from simple_api_tester.configuration import RunContext
from simple_api_tester.data_sources import SqlDataSource
from simple_api_tester.harness_errors import ErrorKind, HarnessError
from simple_api_tester.payload_templating import DataGenerator
from simple_api_tester.reporting import CaseStatus, ReporterHandle
from simple_api_tester.request_dispatch import RequestDispatcher
from simple_api_tester.response_assertions import AssertionKit

from .case_context import CaseContext, SkipCase
from .data_binder import Iteration
from .result_recorder import ResultRecorder
from .retry_controller import AttemptOutcome, RetryController
from .scheduler import ScheduledCase

logger = logging.getLogger(__name__)


class CaseRunner:
    """Runs iterations sequentially on one reporter handle."""

    def __init__(  # pylint: disable=too-many-arguments
        self,
        context: RunContext,
        dispatcher: RequestDispatcher,
        handle: ReporterHandle,
        *,
        data_source: SqlDataSource | None = None,
        recorder: ResultRecorder | None = None,
        data_generator: DataGenerator | None = None,
    ) -> None:
        self._context = context
        self._dispatcher = dispatcher
        self._handle = handle
        self._data_source = data_source
        self._recorder = recorder or ResultRecorder(data_source)
        self._data_generator = data_generator or DataGenerator()

    def run_case(self, scheduled: ScheduledCase, iterations: list[Iteration]) -> list[AttemptOutcome]:
        return [self.run_iteration(scheduled, iteration) for iteration in iterations]

    def run_iteration(self, scheduled: ScheduledCase, iteration: Iteration) -> AttemptOutcome:
        controller = RetryController(self._context.retry_enabled, self._context.max_attempts)
        outcome = controller.run(
            lambda attempt: self._attempt(scheduled, iteration.with_attempt(attempt), controller)
        )
        self._recorder.record(iteration.descriptor.method_name, outcome.status)
        return outcome

    def _attempt(
        self, scheduled: ScheduledCase, iteration: Iteration, controller: RetryController
    ) -> AttemptOutcome:
        handle = self._handle
        handle.start_case(
            iteration.descriptor,
            iteration.attempt,
            invocation=iteration.invocation,
            row=iteration.row,
        )
        if scheduled.description:
            handle.info(scheduled.description)
        assertions = AssertionKit(handle)
        case_context = CaseContext(
            descriptor=iteration.descriptor,
            row=iteration.row,
            invocation=iteration.invocation,
            attempt=iteration.attempt,
            dispatcher=self._dispatcher,
            assertions=assertions,
            handle=handle,
            context=self._context,
            data_source=self._data_source,
            data=self._data_generator,
        )

        status = CaseStatus.PASS
        error: BaseException | None = None
        try:
            scheduled.case.fn(case_context)
            if assertions.failures:
                raise HarnessError(ErrorKind.ASSERTION_FAILURE, "; ".join(assertions.failures))
        except SkipCase as exc:
            status = CaseStatus.SKIP
            handle.skipped(f"{iteration.descriptor.method_name} skipped: {exc}")
        except HarnessError as exc:
            status, error = CaseStatus.FAIL, exc
            handle.failed(f"{iteration.descriptor.method_name} failed: {exc.message}", exc)
            if exc.kind.is_fatal:
                handle.end_case(status, exc)
                raise
        except Exception as exc:  # pylint: disable=broad-exception-caught
            status, error = CaseStatus.FAIL, exc
            handle.failed(f"{iteration.descriptor.method_name} failed: {exc}", exc)

        will_retry = controller.should_retry(status, error)
        if will_retry:
            handle.info(
                f"Retrying {iteration.descriptor.method_name} "
                f"(attempt {iteration.attempt + 1} of {controller.max_attempts})"
            )
        elif status is CaseStatus.PASS:
            handle.passed(f"{iteration.descriptor.method_name} passed")
        handle.end_case(status, error, will_retry=will_retry)
        return AttemptOutcome(
            status=status, attempt=iteration.attempt, error=error, will_retry=will_retry
        )
