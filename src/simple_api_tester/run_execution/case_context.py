"""Values handed to a case body for one attempt."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import ModuleType
from typing import Any

from simple_api_tester import payload_templating
from simple_api_tester.case_registry import TestCaseDescriptor
from simple_api_tester.configuration import RunContext
from simple_api_tester.data_sources import SqlDataSource
from simple_api_tester.payload_templating import DataGenerator
from simple_api_tester.reporting import ReporterHandle
from simple_api_tester.request_dispatch import (
    RequestDispatcher,
    RequestPlan,
    ResponseRecord,
    Service,
)
from simple_api_tester.response_assertions import AssertionKit


class SkipCase(Exception):
    """Raised by a case body to end the attempt with a Skip status."""


@dataclass(frozen=True)
class CaseContext:  # pylint: disable=too-many-instance-attributes
    """Everything a case body needs for one attempt."""

    descriptor: TestCaseDescriptor
    row: Mapping[str, Any]
    invocation: int
    attempt: int
    dispatcher: RequestDispatcher
    assertions: AssertionKit
    handle: ReporterHandle
    context: RunContext
    data_source: SqlDataSource | None = None
    templates: ModuleType = field(default=payload_templating)
    data: DataGenerator = field(default_factory=DataGenerator)

    def value(self, column: str, default: Any = None) -> Any:
        """Row value by column name, ignoring case."""
        lowered = column.lower()
        for key, value in self.row.items():
            if key.lower() == lowered:
                return value
        return default

    def url(self, service: Service, path_template: str = "", *args: Any) -> str:
        return self.dispatcher.build_url(service, path_template, *args)

    def send(self, plan: RequestPlan) -> ResponseRecord:
        return self.dispatcher.send(plan, self.handle)

    def get(self, service: Service | None, path: str, **options: Any) -> ResponseRecord:
        return self.dispatcher.get(service, path, self.handle, **options)

    def post(self, service: Service | None, path: str, **options: Any) -> ResponseRecord:
        return self.dispatcher.post(service, path, self.handle, **options)

    def put(self, service: Service | None, path: str, **options: Any) -> ResponseRecord:
        return self.dispatcher.put(service, path, self.handle, **options)

    def patch(self, service: Service | None, path: str, **options: Any) -> ResponseRecord:
        return self.dispatcher.patch(service, path, self.handle, **options)

    def delete(self, service: Service | None, path: str, **options: Any) -> ResponseRecord:
        return self.dispatcher.delete(service, path, self.handle, **options)

    def skip(self, reason: str) -> None:
        raise SkipCase(reason)
