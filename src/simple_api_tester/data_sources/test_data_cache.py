"""Per-environment test data cache."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from simple_api_tester.harness_errors import ErrorKind, HarnessError

from .query_catalog import SELECT_GROUP, QueryCatalog
from .sql_data_source import DataRow, SqlDataSource

logger = logging.getLogger(__name__)


def data_file_path(testdata_dir: Path, environment: str) -> Path:
    return testdata_dir / f"{environment}_testdata.json"


def write_data_file(
    path: Path, environment: str, groups: dict[str, list[DataRow]]
) -> Path:
    """Write `{ENV: {group: [row, ...]}}` as pretty JSON."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps({environment: groups}, indent=2, ensure_ascii=False, default=str),
            encoding="utf-8",
        )
    except OSError as exc:
        raise HarnessError(ErrorKind.QUERY, f"Failed to write test data {path}: {exc}") from exc
    return path


def read_data_file(path: Path, environment: str) -> dict[str, list[DataRow]]:
    """Read the groups stored for one environment; absent data reads as empty."""
    if not path.exists():
        logger.warning("Test data JSON file not found: %s", path)
        return {}
    try:
        parsed = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise HarnessError(ErrorKind.QUERY, f"Error reading test data JSON {path}: {exc}") from exc
    environment_data = parsed.get(environment) if isinstance(parsed, dict) else None
    if not isinstance(environment_data, dict):
        logger.warning("No test data found for environment: %s in %s", environment, path)
        return {}
    return {
        str(group): [dict(row) for row in rows if isinstance(row, dict)]
        for group, rows in environment_data.items()
        if isinstance(rows, list)
    }


class TestDataCache:
    """Builds the test data for one environment once and serves it to every worker."""

    __test__ = False

    def __init__(
        self,
        environment: str,
        testdata_dir: Path,
        *,
        source: SqlDataSource | None = None,
        catalog: QueryCatalog | None = None,
    ) -> None:
        self._environment = environment
        self._path = data_file_path(testdata_dir, environment)
        self._source = source
        self._catalog = catalog
        self._lock = threading.Lock()
        self._groups: dict[str, list[DataRow]] | None = None

    @property
    def path(self) -> Path:
        return self._path

    def groups(self) -> dict[str, list[DataRow]]:
        groups = self._groups
        if groups is None:
            with self._lock:
                if self._groups is None:
                    self._groups = self._build()
                groups = self._groups
        return groups

    def rows(self) -> list[DataRow]:
        """All rows of every group, in group then row order."""
        return [row for group_rows in self.groups().values() for row in group_rows]

    def _build(self) -> dict[str, list[DataRow]]:
        if self._source is not None and self._catalog is not None:
            if self._catalog.has_group(SELECT_GROUP):
                groups = self._source.materialize(self._catalog, SELECT_GROUP)
                try:
                    write_data_file(self._path, self._environment, groups)
                except HarnessError as exc:
                    logger.warning("Test data kept in memory only: %s", exc.message)
                else:
                    logger.info("Materialized %d test data groups to %s", len(groups), self._path)
                return json.loads(json.dumps(groups, default=str))
            logger.warning("Query catalog has no select queries; using %s", self._path)
        try:
            return read_data_file(self._path, self._environment)
        except HarnessError as exc:
            logger.warning("Test data unavailable, cases run once with empty rows: %s", exc)
            return {}
