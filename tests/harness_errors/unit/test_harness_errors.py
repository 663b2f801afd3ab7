"""Harness error and load result tests."""

from __future__ import annotations

import pytest
from simple_api_tester.harness_errors import ErrorKind, HarnessError, LoadResult


def test_error_kind_policies() -> None:
    assert {kind for kind in ErrorKind if kind.is_fatal} == {
        ErrorKind.MISSING_CONFIG,
        ErrorKind.REPORTER,
    }
    assert {kind for kind in ErrorKind if kind.is_retryable} == {
        ErrorKind.TRANSPORT,
        ErrorKind.ASSERTION_FAILURE,
    }


def test_harness_error_renders_kind_and_message() -> None:
    error = HarnessError(ErrorKind.QUERY, "table missing")

    assert str(error) == "query: table missing"
    assert error.message == "table missing"


def test_load_result_unwraps_value_or_raises() -> None:
    error = HarnessError(ErrorKind.QUERY, "absent")

    assert LoadResult.success(3).unwrap() == 3
    assert LoadResult.failure(error).ok is False
    with pytest.raises(HarnessError) as excinfo:
        LoadResult.failure(error).unwrap()
    assert excinfo.value is error
