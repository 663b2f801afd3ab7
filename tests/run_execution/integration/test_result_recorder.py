"""Result recorder integration tests against a SQLite reporting table."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import requests
from simple_api_tester.case_registry import CaseRegistry
from simple_api_tester.configuration import ConfigRegistry, RunContext, build_run_context
from simple_api_tester.data_sources import SqlDataSource
from simple_api_tester.reporting import CaseStatus, ReporterSink
from simple_api_tester.request_dispatch import RequestDispatcher, Service
from simple_api_tester.run_execution import (
    CaseRunner,
    ResultRecorder,
    bind_iterations,
    select_cases,
)
from simple_api_tester.runner_list import RunnerEntry
from sqlalchemy import create_engine

_REPORTS_TABLE = (
    "CREATE TABLE test_execution_reports ("
    "test_method_name TEXT, test_status TEXT, execution_timestamp TEXT)"
)


class _FakeSession:
    def __init__(self, statuses: list[int]) -> None:
        self.statuses = list(statuses)

    def request(self, _method: str, _url: str, **_kwargs) -> requests.Response:
        response = requests.Response()
        response.status_code = self.statuses.pop(0)
        response._content = b"{}"
        response.headers["Content-Type"] = "application/json"
        return response


def _source(tmp_path: Path, *, with_table: bool = True) -> SqlDataSource:
    source = SqlDataSource(create_engine(f"sqlite:///{tmp_path / 'reports.db'}"))
    if with_table:
        source.execute(_REPORTS_TABLE)
    return source


def _context(tmp_path: Path) -> RunContext:
    registry = ConfigRegistry(
        {
            "env": "QA",
            "run_mode": "remote",
            "runmanager": "Smoke",
            "service_name": "Patients",
            "retry": "yes",
            "log_response": "no",
            "override_reports": "no",
            "auth_type": "basic",
            "access_token_url": "https://auth.example/token",
            "client_id": "client",
            "client_secret": "secret",
            "scope": "api",
            "open_actor_base_url": "https://actor.example",
            "open_actor_username": "user",
            "open_actor_password": "pass",
        }
    )
    return build_run_context(registry, resources_dir=tmp_path, report_dir=tmp_path / "reports")


def _run_cases(tmp_path: Path, source: SqlDataSource, statuses: list[int]) -> list[CaseStatus]:
    registry = CaseRegistry()

    @registry.case(name="TC_GET_PATIENT")
    def get_patient(ctx) -> None:
        ctx.assertions.status_equals(ctx.get(Service.ACTOR, "patients/1"), 200)

    @registry.case(name="TC_PENDING")
    def pending(ctx) -> None:
        ctx.skip("not ready")

    entries = [
        RunnerEntry(testcasename="TC_GET_PATIENT", execute="yes", priority=1),
        RunnerEntry(testcasename="TC_PENDING", execute="yes", priority=2),
    ]
    context = _context(tmp_path)
    sink = ReporterSink()
    sink.start_suite("Patients_Smoke")
    runner = CaseRunner(
        context,
        RequestDispatcher(context, session=_FakeSession(statuses)),
        sink.open_handle(),
        data_source=source,
    )
    statuses_seen: list[CaseStatus] = []
    for scheduled in select_cases(registry.cases(), entries):
        outcomes = runner.run_case(scheduled, bind_iterations(scheduled, []))
        statuses_seen.extend(outcome.status for outcome in outcomes)
    sink.end_suite()
    return statuses_seen


def _stored(source: SqlDataSource) -> list[tuple[str, str]]:
    rows = source.rows(
        "SELECT test_method_name, test_status FROM test_execution_reports ORDER BY rowid"
    )
    return [(row["test_method_name"], row["test_status"]) for row in rows]


def test_final_outcome_of_each_iteration_is_stored(tmp_path: Path) -> None:
    source = _source(tmp_path)

    statuses = _run_cases(tmp_path, source, statuses=[500, 200])

    assert statuses == [CaseStatus.PASS, CaseStatus.SKIP]
    assert _stored(source) == [("TC_GET_PATIENT", "Pass"), ("TC_PENDING", "Skip")]


def test_failed_case_is_stored_as_fail(tmp_path: Path) -> None:
    source = _source(tmp_path)

    _run_cases(tmp_path, source, statuses=[500, 503])

    assert _stored(source)[0] == ("TC_GET_PATIENT", "Fail")


def test_storage_failure_only_warns(tmp_path: Path, caplog) -> None:
    source = _source(tmp_path, with_table=False)

    with caplog.at_level(logging.WARNING):
        statuses = _run_cases(tmp_path, source, statuses=[200])

    assert statuses == [CaseStatus.PASS, CaseStatus.SKIP]
    assert "Result for 'TC_GET_PATIENT' not stored" in caplog.text


def test_recorder_uses_injected_clock(tmp_path: Path) -> None:
    source = _source(tmp_path)
    recorder = ResultRecorder(source, clock=lambda: datetime(2024, 5, 1, 9, 30))

    assert recorder.record("TC_CLOCK", CaseStatus.FAIL) is True

    stored = source.first_row("SELECT execution_timestamp FROM test_execution_reports")
    assert stored["execution_timestamp"].startswith("2024-05-01")


def test_recorder_without_data_source_stores_nothing() -> None:
    recorder = ResultRecorder(None)

    assert recorder.enabled is False
    assert recorder.record("TC_GET_PATIENT", CaseStatus.PASS) is False
