"""SQL-backed data source service."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from simple_api_tester.configuration import ConfigKey, ConfigRegistry
from simple_api_tester.harness_errors import ErrorKind, HarnessError, LoadResult

from .query_catalog import QueryCatalog

logger = logging.getLogger(__name__)

DataRow = dict[str, Any]


class SqlDataSource:
    """Execute SQL through an engine and return rows labeled by column name."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    def rows(self, sql: str) -> list[DataRow]:
        try:
            with self._engine.connect() as connection:
                result = connection.execute(text(sql))
                return [dict(row) for row in result.mappings()]
        except SQLAlchemyError as exc:
            raise HarnessError(ErrorKind.QUERY, f"Query failed: {_first_line(exc)}") from exc

    def rows_for(self, catalog: QueryCatalog, query_type: str, name: str) -> list[DataRow]:
        return self.rows(catalog.query(query_type, name))

    def first_row(self, sql: str) -> dict[str, str]:
        """Return the first row with every value as text, or an empty mapping."""
        rows = self.rows(sql)
        if not rows:
            return {}
        return {column: "" if value is None else str(value) for column, value in rows[0].items()}

    def execute(self, sql: str, parameters: Mapping[str, Any] | None = None) -> int:
        """Run a data-changing statement and return the affected row count."""
        try:
            with self._engine.begin() as connection:
                result = connection.execute(text(sql), dict(parameters or {}))
                return result.rowcount
        except SQLAlchemyError as exc:
            raise HarnessError(ErrorKind.QUERY, f"Statement failed: {_first_line(exc)}") from exc

    def materialize(self, catalog: QueryCatalog, query_type: str) -> dict[str, list[DataRow]]:
        """Run every query of one type; a failing query contributes no rows."""
        materialized: dict[str, list[DataRow]] = {}
        for name, sql in catalog.group(query_type).items():
            try:
                materialized[name] = self.rows(sql)
            except HarnessError as exc:
                logger.warning("Query '%s' produced no rows: %s", name, exc.message)
                materialized[name] = []
        return materialized


def connect_data_source(
    registry: ConfigRegistry, *, engine: Engine | None = None
) -> LoadResult[SqlDataSource]:
    """Build the configured database engine and check that it accepts connections."""
    if engine is None:
        url = registry.find(ConfigKey.DB_URL)
        if url is None:
            return LoadResult.failure(
                HarnessError(ErrorKind.QUERY, "No database configured (db_url is empty).")
            )
        try:
            engine = create_engine(_database_url(registry, url), pool_pre_ping=True)
        except (ArgumentError, ImportError) as exc:
            return LoadResult.failure(
                HarnessError(ErrorKind.QUERY, f"Invalid database url: {exc}")
            )

    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        return LoadResult.failure(
            HarnessError(ErrorKind.QUERY, f"Database connection failed: {_first_line(exc)}")
        )
    logger.info("Connected to database %s", engine.url.render_as_string(hide_password=True))
    return LoadResult.success(SqlDataSource(engine))


def _database_url(registry: ConfigRegistry, raw_url: str) -> URL:
    url = make_url(raw_url)
    username = registry.find(ConfigKey.DB_USERNAME)
    password = registry.find(ConfigKey.DB_PASSWORD)
    if username and not url.username:
        url = url.set(username=username)
    if password and not url.password:
        url = url.set(password=password)
    return url


def _first_line(exc: Exception) -> str:
    return str(exc).strip().splitlines()[0] if str(exc).strip() else type(exc).__name__
