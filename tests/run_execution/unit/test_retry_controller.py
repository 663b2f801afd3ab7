"""Retry controller tests."""

from __future__ import annotations

from simple_api_tester.harness_errors import ErrorKind, HarnessError
from simple_api_tester.reporting import CaseStatus
from simple_api_tester.run_execution import AttemptOutcome, RetryController, is_retryable


def _always_failing(controller: RetryController, error: BaseException):
    def attempt(number: int) -> AttemptOutcome:
        will_retry = controller.should_retry(CaseStatus.FAIL, error)
        return AttemptOutcome(CaseStatus.FAIL, number, error, will_retry)

    return attempt


def test_retry_disabled_runs_a_single_attempt() -> None:
    controller = RetryController(enabled=False, max_attempts=3)
    error = HarnessError(ErrorKind.TRANSPORT, "connection reset")

    outcome = controller.run(_always_failing(controller, error))

    assert outcome.status is CaseStatus.FAIL
    assert controller.attempts == 1


def test_retry_enabled_stops_at_max_attempts() -> None:
    controller = RetryController(enabled=True, max_attempts=3)
    error = HarnessError(ErrorKind.ASSERTION_FAILURE, "status mismatch")

    outcome = controller.run(_always_failing(controller, error))

    assert outcome.attempt == 3
    assert controller.attempts == 3
    assert outcome.will_retry is False


def test_pass_ends_the_loop_immediately() -> None:
    controller = RetryController(enabled=True, max_attempts=5)

    outcome = controller.run(lambda number: AttemptOutcome(CaseStatus.PASS, number))

    assert outcome.status is CaseStatus.PASS
    assert controller.attempts == 1


def test_templating_and_query_errors_are_not_retried() -> None:
    assert is_retryable(HarnessError(ErrorKind.TEMPLATING, "bad template")) is False
    assert is_retryable(HarnessError(ErrorKind.QUERY, "bad sql")) is False
    assert is_retryable(HarnessError(ErrorKind.TRANSPORT, "timeout")) is True
    assert is_retryable(RuntimeError("boom")) is True
    assert is_retryable(None) is False

    controller = RetryController(enabled=True)
    controller.run(_always_failing(controller, HarnessError(ErrorKind.TEMPLATING, "x")))
    assert controller.attempts == 1
