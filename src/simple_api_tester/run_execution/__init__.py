"""Run execution domain exports."""

from .api_test_run_use_case import RunExecutionError, execute_api_test_run
from .case_context import CaseContext, SkipCase
from .case_runner import CaseRunner
from .data_binder import Iteration, bind_iterations, matching_rows
from .result_recorder import ResultRecorder
from .retry_controller import AttemptOutcome, RetryController, is_retryable
from .run_contracts import RunOutcome, RunRequest
from .scheduler import ScheduledCase, expand_invocations, select_cases

__all__ = [
    "RunRequest",
    "RunOutcome",
    "RunExecutionError",
    "execute_api_test_run",
    "CaseContext",
    "SkipCase",
    "CaseRunner",
    "ResultRecorder",
    "Iteration",
    "bind_iterations",
    "matching_rows",
    "AttemptOutcome",
    "RetryController",
    "is_retryable",
    "ScheduledCase",
    "select_cases",
    "expand_invocations",
]
