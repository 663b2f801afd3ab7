"""Binds scheduled cases to their test data rows."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from simple_api_tester.case_registry import TestCaseDescriptor

from .scheduler import ScheduledCase


@dataclass(frozen=True)
class Iteration:
    """One execution of a case with one data row."""

    descriptor: TestCaseDescriptor
    row: Mapping[str, Any] = field(default_factory=dict)
    invocation: int = 1
    attempt: int = 1

    def with_attempt(self, attempt: int) -> Iteration:
        return replace(self, attempt=attempt)


def matching_rows(
    descriptor: TestCaseDescriptor, rows: Sequence[Mapping[str, Any]]
) -> list[dict[str, Any]]:
    """Rows for this case with execute=yes, duplicates removed, first occurrence kept."""
    case_name = descriptor.method_name.lower()
    unique: list[dict[str, Any]] = []
    for row in rows:
        if str(row.get("testcasename", "")).strip().lower() != case_name:
            continue
        if str(row.get("execute", "")).strip().lower() != "yes":
            continue
        candidate = dict(row)
        if candidate not in unique:
            unique.append(candidate)
    return unique


def bind_iterations(
    scheduled: ScheduledCase, rows: Sequence[Mapping[str, Any]]
) -> list[Iteration]:
    """Yield `count x max(1, matching rows)` iterations; no rows means one empty row."""
    bound_rows: list[dict[str, Any]] = matching_rows(scheduled.case.descriptor, rows) or [{}]
    return [
        Iteration(descriptor=scheduled.case.descriptor, row=row, invocation=invocation)
        for invocation in range(1, scheduled.count + 1)
        for row in bound_rows
    ]
