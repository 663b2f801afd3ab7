"""Runner list entities."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

TEST_CASE_LISTS_KEY = "testCaseLists"


@dataclass(frozen=True)
class RunnerEntry:
    """Selection record for one test case within a run-manager."""

    testcasename: str
    execute: str = "no"
    priority: int = 0
    count: int = 1
    testdescription: str = ""

    @property
    def is_enabled(self) -> bool:
        return self.execute.strip().lower() == "yes"

    @staticmethod
    def from_mapping(raw: Mapping[str, Any]) -> RunnerEntry:
        """Build an entry from a JSON/SQL/Excel row; field names match case-insensitively."""
        lowered = {str(key).strip().lower(): value for key, value in raw.items()}
        name = _text(lowered.get("testcasename"))
        return RunnerEntry(
            testcasename=name,
            execute=_text(lowered.get("execute")) or "no",
            priority=_coerce_int(lowered.get("priority"), default=0, field_name="priority", case=name),
            count=_coerce_count(lowered.get("count"), case=name),
            testdescription=_text(lowered.get("testdescription")),
        )

    def to_mapping(self) -> dict[str, str]:
        return {
            "testcasename": self.testcasename,
            "execute": self.execute,
            "priority": str(self.priority),
            "count": str(self.count),
            "testdescription": self.testdescription,
        }


@dataclass(frozen=True)
class RunnerList:
    """Parsed runner-list document: entries per run-manager, in file order."""

    entries_by_manager: Mapping[str, tuple[RunnerEntry, ...]] = field(default_factory=dict)

    def entries(self, run_manager: str) -> list[RunnerEntry]:
        entries = self.entries_by_manager.get(run_manager)
        if entries is None:
            logger.warning("Runner list has no entries for run-manager '%s'", run_manager)
            return []
        return list(entries)

    @property
    def run_managers(self) -> tuple[str, ...]:
        return tuple(self.entries_by_manager)

    @staticmethod
    def from_document(document: Mapping[str, Any]) -> RunnerList:
        managers: dict[str, tuple[RunnerEntry, ...]] = {}
        for run_manager, section in document.items():
            raw_entries = section.get(TEST_CASE_LISTS_KEY) if isinstance(section, Mapping) else None
            if not isinstance(raw_entries, Sequence) or isinstance(raw_entries, str):
                logger.warning("Run-manager '%s' has no %s array", run_manager, TEST_CASE_LISTS_KEY)
                managers[str(run_manager)] = ()
                continue
            managers[str(run_manager)] = _unique_entries(raw_entries, str(run_manager))
        return RunnerList(entries_by_manager=managers)


def _unique_entries(raw_entries: Sequence[Any], run_manager: str) -> tuple[RunnerEntry, ...]:
    entries: list[RunnerEntry] = []
    seen: set[str] = set()
    for raw in raw_entries:
        if not isinstance(raw, Mapping):
            continue
        entry = RunnerEntry.from_mapping(raw)
        if not entry.testcasename:
            logger.warning("Skipping runner entry without testcasename in '%s'", run_manager)
            continue
        key = entry.testcasename.lower()
        if key in seen:
            logger.warning(
                "Duplicate runner entry '%s' in '%s'; keeping the first", entry.testcasename, run_manager
            )
            continue
        seen.add(key)
        entries.append(entry)
    return tuple(entries)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _coerce_count(value: Any, *, case: str) -> int:
    count = _coerce_int(value, default=1, field_name="count", case=case)
    if count < 1:
        logger.warning("Invocation count %d for %s is below 1; using 1", count, case)
        return 1
    return count


def _coerce_int(value: Any, *, default: int, field_name: str, case: str) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    if isinstance(value, bool):
        logger.warning("Invalid %s '%s' for %s; using %d", field_name, value, case, default)
        return default
    try:
        return int(float(value)) if isinstance(value, float) else int(str(value).strip())
    except ValueError:
        logger.warning("Invalid %s '%s' for %s; using %d", field_name, value, case, default)
        return default
