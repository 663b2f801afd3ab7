"""Runner list source conversion tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from openpyxl import Workbook
from simple_api_tester.data_sources import QueryCatalog, SqlDataSource
from simple_api_tester.harness_errors import ErrorKind, HarnessError
from simple_api_tester.runner_list import (
    build_runner_document_from_excel,
    build_runner_document_from_sql,
    load_runner_list,
    runner_list_path,
    write_runner_list_json,
)
from sqlalchemy import create_engine


def _runner_workbook(tmp_path: Path) -> Path:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Runner"
    sheet.append(["testcasename", "execute", "priority", "count", "testdescription"])
    sheet.append(["TC_A", "yes", 2, 1, "first case"])
    sheet.append([None, None, None, None, None])
    sheet.append(["TC_B", "no", 1.0, 3, None])
    path = tmp_path / "runner.xlsx"
    workbook.save(path)
    return path


def test_excel_sheet_becomes_runner_document(tmp_path: Path) -> None:
    document = build_runner_document_from_excel(_runner_workbook(tmp_path), "Runner", "Smoke")

    assert document == {
        "Smoke": {
            "testCaseLists": [
                {
                    "testcasename": "TC_A",
                    "execute": "yes",
                    "priority": "2",
                    "count": "1",
                    "testdescription": "first case",
                },
                {
                    "testcasename": "TC_B",
                    "execute": "no",
                    "priority": "1",
                    "count": "3",
                    "testdescription": "",
                },
            ]
        }
    }


def test_missing_sheet_raises_query_error(tmp_path: Path) -> None:
    with pytest.raises(HarnessError) as excinfo:
        build_runner_document_from_excel(_runner_workbook(tmp_path), "Absent", "Smoke")

    assert excinfo.value.kind is ErrorKind.QUERY


def test_written_document_loads_back_as_runner_list(tmp_path: Path) -> None:
    document = build_runner_document_from_excel(_runner_workbook(tmp_path), "Runner", "Smoke")
    path = write_runner_list_json(document, runner_list_path(tmp_path / "testdata", "Smoke"))

    runner_list = load_runner_list(path, "Smoke").unwrap()

    assert path.name == "Smoke_testcase.json"
    assert [entry.testcasename for entry in runner_list.entries("Smoke")] == ["TC_A", "TC_B"]
    assert runner_list.entries("Smoke")[1].count == 3


def test_load_reports_missing_file_and_run_manager(tmp_path: Path) -> None:
    assert load_runner_list(tmp_path / "absent.json").ok is False

    path = tmp_path / "Smoke_testcase.json"
    path.write_text(json.dumps({"Smoke": {"testCaseLists": []}}), encoding="utf-8")

    result = load_runner_list(path, "Nightly")
    assert result.ok is False
    assert result.error is not None
    assert "Nightly" in result.error.message


def test_sql_runner_query_feeds_test_case_lists(tmp_path: Path) -> None:
    source = SqlDataSource(create_engine(f"sqlite:///{tmp_path / 'runner.db'}"))
    source.execute("CREATE TABLE runner (testcasename TEXT, execute TEXT, priority INTEGER)")
    source.execute("INSERT INTO runner VALUES ('TC_A', 'yes', 1)")
    catalog = QueryCatalog(
        groups={
            "runnerlistqueries": {
                "runnerlist": "SELECT testcasename, execute, priority FROM runner",
                "owners": "SELECT 'qa' AS team",
            }
        }
    )

    document = build_runner_document_from_sql(source, catalog, "Smoke")

    assert document == {
        "Smoke": {
            "testCaseLists": [{"testcasename": "TC_A", "execute": "yes", "priority": "1"}],
            "owners": [{"team": "qa"}],
        }
    }


def test_sql_runner_document_requires_runner_query(tmp_path: Path) -> None:
    source = SqlDataSource(create_engine(f"sqlite:///{tmp_path / 'runner.db'}"))
    catalog = QueryCatalog(groups={"runnerlistqueries": {"owners": "SELECT 1 AS one"}})

    with pytest.raises(HarnessError):
        build_runner_document_from_sql(source, catalog, "Smoke")
