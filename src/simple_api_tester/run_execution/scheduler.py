"""Runner-list driven case selection and ordering."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from simple_api_tester.case_registry import RegisteredCase
from simple_api_tester.runner_list import RunnerEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduledCase:
    """A registered case selected for execution with its runner settings."""

    case: RegisteredCase
    priority: int
    count: int
    description: str = ""

    @property
    def name(self) -> str:
        return self.case.name


def select_cases(
    cases: Sequence[RegisteredCase], entries: Sequence[RunnerEntry]
) -> list[ScheduledCase]:
    """Keep cases whose runner entry says execute=yes, ordered by ascending priority.

    Names match case-insensitively. Equal priorities keep registry order.
    """
    if not entries:
        logger.warning("Runner list is empty; no test cases will be executed.")
        return []
    by_name = {entry.testcasename.lower(): entry for entry in entries}
    selected: list[ScheduledCase] = []
    for case in cases:
        entry = by_name.get(case.name.lower())
        if entry is None or not entry.is_enabled:
            continue
        selected.append(
            ScheduledCase(
                case=case,
                priority=entry.priority,
                count=entry.count,
                description=entry.testdescription,
            )
        )
    selected.sort(key=lambda scheduled: scheduled.priority)
    logger.info("Selected %d of %d registered test cases", len(selected), len(cases))
    return selected


def expand_invocations(scheduled: Sequence[ScheduledCase]) -> list[ScheduledCase]:
    """Repeat each scheduled case by its invocation count, keeping schedule order."""
    return [item for item in scheduled for _ in range(item.count)]
