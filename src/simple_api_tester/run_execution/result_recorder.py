"""Stores the final status of each test iteration in the reporting database."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from simple_api_tester.data_sources import SqlDataSource
from simple_api_tester.harness_errors import HarnessError
from simple_api_tester.reporting import CaseStatus

logger = logging.getLogger(__name__)

INSERT_RESULT_SQL = (
    "INSERT INTO test_execution_reports (test_method_name, test_status, execution_timestamp) "
    "VALUES (:test_method_name, :test_status, :execution_timestamp)"
)

_STATUS_LABELS = {
    CaseStatus.PASS: "Pass",
    CaseStatus.FAIL: "Fail",
    CaseStatus.SKIP: "Skip",
}


class ResultRecorder:
    """Inserts one `test_execution_reports` row per final outcome; storage errors only warn."""

    def __init__(
        self,
        source: SqlDataSource | None,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._source = source
        self._clock = clock

    @property
    def enabled(self) -> bool:
        return self._source is not None

    def record(self, method_name: str, status: CaseStatus) -> bool:
        """Return True when the row was stored."""
        if self._source is None:
            return False
        try:
            affected = self._source.execute(
                INSERT_RESULT_SQL,
                {
                    "test_method_name": method_name,
                    "test_status": _STATUS_LABELS[status],
                    "execution_timestamp": self._clock(),
                },
            )
        except HarnessError as exc:
            logger.warning("Result for '%s' not stored: %s", method_name, exc.message)
            return False
        if affected == 0:
            logger.warning("Result for '%s' not stored: no rows affected", method_name)
            return False
        logger.debug("Stored %s result for '%s'", _STATUS_LABELS[status], method_name)
        return True
