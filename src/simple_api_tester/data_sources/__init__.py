"""Data source domain exports."""

from .query_catalog import RUNNER_LIST_GROUP, SELECT_GROUP, SQL_QUERY_FILENAME, QueryCatalog
from .sql_data_source import DataRow, SqlDataSource, connect_data_source
from .test_data_cache import (
    TestDataCache,
    read_data_file,
    data_file_path,
    write_data_file,
)

__all__ = [
    "QueryCatalog",
    "SQL_QUERY_FILENAME",
    "SELECT_GROUP",
    "RUNNER_LIST_GROUP",
    "DataRow",
    "SqlDataSource",
    "connect_data_source",
    "TestDataCache",
    "data_file_path",
    "read_data_file",
    "write_data_file",
]
