"""Named SQL query catalog."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from simple_api_tester.harness_errors import ErrorKind, HarnessError, LoadResult

SQL_QUERY_FILENAME = "SqlQuery.json"
SELECT_GROUP = "select"
RUNNER_LIST_GROUP = "runnerlist"


@dataclass(frozen=True)
class QueryCatalog:
    """Query groups keyed by `<type>queries`, each mapping a name to SQL text."""

    groups: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    source: Path | None = None

    @staticmethod
    def load(path: Path | str) -> LoadResult[QueryCatalog]:
        """Read the queries file; a missing or malformed file is reported, not raised."""
        catalog_path = Path(path)
        if not catalog_path.exists():
            return LoadResult.failure(
                HarnessError(ErrorKind.QUERY, f"SQL query file not found: {catalog_path}")
            )
        try:
            parsed = json.loads(catalog_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            return LoadResult.failure(
                HarnessError(ErrorKind.QUERY, f"Failed to read SQL query file {catalog_path}: {exc}")
            )
        if not isinstance(parsed, Mapping):
            return LoadResult.failure(
                HarnessError(ErrorKind.QUERY, "SQL query file root must be an object.")
            )

        groups: dict[str, dict[str, str]] = {}
        for group_name, queries in parsed.items():
            if not isinstance(queries, Mapping):
                return LoadResult.failure(
                    HarnessError(ErrorKind.QUERY, f"Query group '{group_name}' must be an object.")
                )
            groups[str(group_name).lower()] = {
                str(name): str(sql) for name, sql in queries.items()
            }
        return LoadResult.success(QueryCatalog(groups=groups, source=catalog_path.resolve()))

    def group(self, query_type: str) -> dict[str, str]:
        """Return the queries of one type, e.g. `select` -> `selectqueries`."""
        key = _group_key(query_type)
        try:
            return dict(self.groups[key])
        except KeyError as exc:
            raise HarnessError(
                ErrorKind.QUERY, f"No queries found for type: {query_type} (key: {key})"
            ) from exc

    def query(self, query_type: str, name: str) -> str:
        queries = self.group(query_type)
        try:
            return queries[name]
        except KeyError as exc:
            raise HarnessError(
                ErrorKind.QUERY, f"Query '{name}' is not defined in {_group_key(query_type)}"
            ) from exc

    def has_group(self, query_type: str) -> bool:
        return _group_key(query_type) in self.groups


def _group_key(query_type: str) -> str:
    lowered = query_type.strip().lower()
    return lowered if lowered.endswith("queries") else f"{lowered}queries"
