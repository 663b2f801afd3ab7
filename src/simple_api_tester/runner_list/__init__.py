"""Runner list domain exports."""

from .runner_list_loader import (
    build_runner_document_from_excel,
    build_runner_document_from_sql,
    load_runner_list,
    runner_list_path,
    write_runner_list_json,
)
from .runner_models import TEST_CASE_LISTS_KEY, RunnerEntry, RunnerList

__all__ = [
    "RunnerEntry",
    "RunnerList",
    "TEST_CASE_LISTS_KEY",
    "build_runner_document_from_excel",
    "build_runner_document_from_sql",
    "load_runner_list",
    "runner_list_path",
    "write_runner_list_json",
]
