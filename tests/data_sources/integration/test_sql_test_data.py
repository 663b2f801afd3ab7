"""SQL data source and test data cache integration tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from simple_api_tester.configuration import ConfigRegistry
from simple_api_tester.data_sources import (
    QueryCatalog,
    SqlDataSource,
    TestDataCache,
    connect_data_source,
    data_file_path,
    read_data_file,
    write_data_file,
)
from simple_api_tester.harness_errors import ErrorKind, HarnessError
from sqlalchemy import create_engine


def _seeded_source(tmp_path: Path) -> SqlDataSource:
    engine = create_engine(f"sqlite:///{tmp_path / 'testdata.db'}")
    source = SqlDataSource(engine)
    source.execute("CREATE TABLE patient (id INTEGER, name TEXT, testcasename TEXT)")
    source.execute(
        "INSERT INTO patient VALUES (:id, :name, :case)", {"id": 1, "name": "Ada", "case": "TC_A"}
    )
    source.execute(
        "INSERT INTO patient VALUES (:id, :name, :case)", {"id": 2, "name": None, "case": "TC_B"}
    )
    return source


def _catalog(queries: dict[str, str]) -> QueryCatalog:
    return QueryCatalog(groups={"selectqueries": queries})


def test_rows_are_labeled_by_column(tmp_path: Path) -> None:
    source = _seeded_source(tmp_path)

    rows = source.rows("SELECT id, name FROM patient ORDER BY id")

    assert rows == [{"id": 1, "name": "Ada"}, {"id": 2, "name": None}]


def test_first_row_returns_text_values_of_the_first_match(tmp_path: Path) -> None:
    source = _seeded_source(tmp_path)

    first = source.first_row("SELECT id, name FROM patient ORDER BY id")

    assert first == {"id": "1", "name": "Ada"}
    assert source.first_row("SELECT id, name FROM patient WHERE id = 2") == {"id": "2", "name": ""}
    assert source.first_row("SELECT id FROM patient WHERE id = 99") == {}


def test_failing_sql_raises_query_error(tmp_path: Path) -> None:
    source = _seeded_source(tmp_path)

    with pytest.raises(HarnessError) as excinfo:
        source.rows("SELECT * FROM missing_table")

    assert excinfo.value.kind is ErrorKind.QUERY


def test_materialize_keeps_going_after_a_failing_query(tmp_path: Path) -> None:
    source = _seeded_source(tmp_path)
    catalog = _catalog(
        {"patients": "SELECT id FROM patient ORDER BY id", "broken": "SELECT * FROM nowhere"}
    )

    groups = source.materialize(catalog, "select")

    assert groups == {"patients": [{"id": 1}, {"id": 2}], "broken": []}


def test_connect_data_source_checks_the_engine(tmp_path: Path) -> None:
    registry = ConfigRegistry({"db_url": f"sqlite:///{tmp_path / 'connect.db'}"})

    result = connect_data_source(registry)

    assert result.ok is True
    assert result.unwrap().rows("SELECT 1 AS one") == [{"one": 1}]


def test_connect_data_source_without_url_fails() -> None:
    result = connect_data_source(ConfigRegistry({"db_url": ""}))

    assert result.ok is False
    assert result.error is not None
    assert result.error.kind is ErrorKind.QUERY


def test_cache_materializes_once_and_writes_json(tmp_path: Path) -> None:
    source = _seeded_source(tmp_path)
    testdata_dir = tmp_path / "testdata"
    cache = TestDataCache(
        "QA",
        testdata_dir,
        source=source,
        catalog=_catalog({"patients": "SELECT id, testcasename FROM patient ORDER BY id"}),
    )

    first = cache.groups()
    second = cache.groups()

    assert first is second
    assert cache.rows() == [
        {"id": 1, "testcasename": "TC_A"},
        {"id": 2, "testcasename": "TC_B"},
    ]
    stored = json.loads(data_file_path(testdata_dir, "QA").read_text(encoding="utf-8"))
    assert stored == {"QA": first}


def test_cache_reads_json_when_no_source_is_available(tmp_path: Path) -> None:
    path = write_data_file(
        data_file_path(tmp_path, "STAGE"), "STAGE", {"patients": [{"testcasename": "TC_A"}]}
    )

    cache = TestDataCache("STAGE", tmp_path)

    assert cache.path == path
    assert cache.rows() == [{"testcasename": "TC_A"}]


def test_missing_or_broken_json_reads_as_empty(tmp_path: Path) -> None:
    assert read_data_file(tmp_path / "QA_testdata.json", "QA") == {}

    broken = tmp_path / "QA_testdata.json"
    broken.write_text("{", encoding="utf-8")

    with pytest.raises(HarnessError):
        read_data_file(broken, "QA")
    assert TestDataCache("QA", tmp_path).groups() == {}


def test_other_environment_reads_as_empty(tmp_path: Path) -> None:
    write_data_file(data_file_path(tmp_path, "QA"), "QA", {"patients": [{"id": 1}]})

    assert read_data_file(data_file_path(tmp_path, "QA"), "PROD") == {}
