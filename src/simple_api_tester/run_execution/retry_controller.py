"""Bounded retry policy for one iteration."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from simple_api_tester.configuration.run_context import DEFAULT_MAX_ATTEMPTS
from simple_api_tester.harness_errors import HarnessError
from simple_api_tester.reporting import CaseStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttemptOutcome:
    """Terminal result of one attempt."""

    status: CaseStatus
    attempt: int
    error: BaseException | None = None
    will_retry: bool = False


def is_retryable(error: BaseException | None) -> bool:
    """Transport and assertion failures retry; so do unexpected errors from case code."""
    if error is None:
        return False
    if isinstance(error, HarnessError):
        return error.kind.is_retryable
    return True


class RetryController:
    """Counts attempts of one iteration and decides whether a failure runs again."""

    def __init__(self, enabled: bool, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        self.enabled = enabled
        self.max_attempts = max(1, max_attempts)
        self._attempts = 0

    @property
    def attempts(self) -> int:
        return self._attempts

    def should_retry(self, status: CaseStatus, error: BaseException | None) -> bool:
        return (
            self.enabled
            and status is CaseStatus.FAIL
            and is_retryable(error)
            and self._attempts < self.max_attempts
        )

    def run(self, attempt_fn: Callable[[int], AttemptOutcome]) -> AttemptOutcome:
        """Call `attempt_fn(attempt)` until it reports no pending retry."""
        self._attempts = 0
        while True:
            self._attempts += 1
            outcome = attempt_fn(self._attempts)
            if not outcome.will_retry:
                return outcome
            logger.info(
                "Retrying after failed attempt %d of %d: %s",
                outcome.attempt,
                self.max_attempts,
                outcome.error,
            )
