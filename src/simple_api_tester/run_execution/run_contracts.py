"""Run execution entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from simple_api_tester.email_summary import SendStatus


@dataclass(frozen=True)
class RunRequest:  # pylint: disable=too-many-instance-attributes
    """Input contract for executing one run."""

    config_path: str
    cases_ref: str | None
    resources_dir: str
    output_dir: str | None = None
    workers: int = 1
    runner_excel: str | None = None
    runner_sheet: str | None = None
    run_manager: str | None = None
    service_name: str | None = None
    cases_dir: str | None = None


@dataclass(frozen=True)
class RunOutcome:
    """Output contract for one completed run."""

    main_report: Path
    failed_report: Path
    scheduled: int
    passed: int
    failed: int
    skipped: int
    email_status: SendStatus
