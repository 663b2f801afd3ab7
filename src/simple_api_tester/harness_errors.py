"""Harness error kinds and loader results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Failure categories raised by harness components."""

    MISSING_CONFIG = "missing_config"
    TEMPLATING = "templating"
    QUERY = "query"
    TRANSPORT = "transport"
    ASSERTION_FAILURE = "assertion_failure"
    REPORTER = "reporter"

    @property
    def is_fatal(self) -> bool:
        """Whether the failure aborts the whole run instead of one iteration."""
        return self in (ErrorKind.MISSING_CONFIG, ErrorKind.REPORTER)

    @property
    def is_retryable(self) -> bool:
        return self in (ErrorKind.TRANSPORT, ErrorKind.ASSERTION_FAILURE)


class HarnessError(Exception):
    """Raised by harness components; `kind` decides how the run reacts."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


@dataclass(frozen=True)
class LoadResult(Generic[T]):
    """Outcome of a loader that may fail for expected reasons."""

    value: T | None = None
    error: HarnessError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @staticmethod
    def success(value: T) -> LoadResult[T]:
        return LoadResult(value=value)

    @staticmethod
    def failure(error: HarnessError) -> LoadResult[T]:
        return LoadResult(error=error)

    def unwrap(self) -> T:
        """Return the loaded value or raise the recorded error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
