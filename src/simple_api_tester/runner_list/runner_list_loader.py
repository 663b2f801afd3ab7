"""Runner list document builders and loader."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import date, datetime
from pathlib import Path
from typing import Any

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from simple_api_tester.data_sources import RUNNER_LIST_GROUP, QueryCatalog, SqlDataSource
from simple_api_tester.harness_errors import ErrorKind, HarnessError, LoadResult

from .runner_models import TEST_CASE_LISTS_KEY, RunnerList

logger = logging.getLogger(__name__)

RunnerDocument = dict[str, dict[str, list[dict[str, str]]]]


def runner_list_path(testdata_dir: Path, run_manager: str) -> Path:
    return testdata_dir / f"{run_manager}_testcase.json"


def build_runner_document_from_sql(
    source: SqlDataSource, catalog: QueryCatalog, run_manager: str
) -> RunnerDocument:
    """Run the `runnerlistqueries` group; the `runnerlist` query feeds testCaseLists."""
    lists: dict[str, list[dict[str, str]]] = {}
    for name, sql in catalog.group(RUNNER_LIST_GROUP).items():
        rows = [_text_row(row) for row in source.rows(sql)]
        list_key = TEST_CASE_LISTS_KEY if name.lower() == RUNNER_LIST_GROUP else name
        lists[list_key] = rows
    if TEST_CASE_LISTS_KEY not in lists:
        raise HarnessError(
            ErrorKind.QUERY, f"runnerlistqueries must define a '{RUNNER_LIST_GROUP}' query."
        )
    return {run_manager: lists}


def build_runner_document_from_excel(
    workbook_path: Path | str, sheet_name: str, run_manager: str
) -> RunnerDocument:
    """Convert a runner sheet: the header row names the fields, one entry per data row."""
    path = Path(workbook_path)
    if not path.exists():
        raise HarnessError(ErrorKind.QUERY, f"Runner workbook not found: {path}")
    try:
        workbook = load_workbook(path, data_only=True, read_only=True)
    except (InvalidFileException, OSError, KeyError) as exc:
        raise HarnessError(ErrorKind.QUERY, f"Failed to open runner workbook {path}: {exc}") from exc
    try:
        if sheet_name not in workbook.sheetnames:
            raise HarnessError(
                ErrorKind.QUERY, f"Sheet '{sheet_name}' not found in runner workbook {path}"
            )
        rows = list(workbook[sheet_name].iter_rows(values_only=True))
    finally:
        workbook.close()

    if not rows:
        return {run_manager: {TEST_CASE_LISTS_KEY: []}}
    headers = [_cell_text(value) for value in rows[0]]
    entries: list[dict[str, str]] = []
    for values in rows[1:]:
        if all(value is None or _cell_text(value) == "" for value in values):
            continue
        entries.append(
            {
                header: _cell_text(values[index]) if index < len(values) else ""
                for index, header in enumerate(headers)
                if header
            }
        )
    return {run_manager: {TEST_CASE_LISTS_KEY: entries}}


def write_runner_list_json(document: Mapping[str, Any], path: Path) -> Path:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError as exc:
        raise HarnessError(ErrorKind.QUERY, f"Failed to write runner list {path}: {exc}") from exc
    logger.info("Runner list written to %s", path)
    return path


def load_runner_list(path: Path | str, run_manager: str | None = None) -> LoadResult[RunnerList]:
    """Read a runner-list JSON document, optionally checking one run-manager is present."""
    runner_path = Path(path)
    if not runner_path.exists():
        return LoadResult.failure(
            HarnessError(ErrorKind.QUERY, f"Runner list file not found: {runner_path}")
        )
    try:
        parsed = json.loads(runner_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        return LoadResult.failure(
            HarnessError(ErrorKind.QUERY, f"Failed to read runner list {runner_path}: {exc}")
        )
    if not isinstance(parsed, Mapping):
        return LoadResult.failure(
            HarnessError(ErrorKind.QUERY, "Runner list root must be an object.")
        )
    if run_manager is not None and run_manager not in parsed:
        return LoadResult.failure(
            HarnessError(
                ErrorKind.QUERY, f"Run-manager '{run_manager}' not found in {runner_path}"
            )
        )
    return LoadResult.success(RunnerList.from_document(parsed))


def _text_row(row: Mapping[str, Any]) -> dict[str, str]:
    return {str(column): _cell_text(value) for column, value in row.items()}


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime | date):
        return value.isoformat()
    return str(value).strip()
