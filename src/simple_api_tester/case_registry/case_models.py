"""Test case registration entities."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from simple_api_tester.run_execution.case_context import CaseContext

DEFAULT_AUTHOR = "Unknown"


class CategoryType(str, Enum):
    """Fixed set of test case categories."""

    SMOKE = "SMOKE"
    REGRESSION = "REGRESSION"
    SANITY = "SANITY"
    E2E = "E2E"
    FUNCTIONAL = "FUNCTIONAL"
    PERFORMANCE = "PERFORMANCE"
    SECURITY = "SECURITY"
    USABILITY = "USABILITY"
    API = "API"
    UI = "UI"
    FAILING = "FAILING"
    SKIPPED = "SKIPPED"
    BDD = "BDD"


@dataclass(frozen=True)
class TestCaseDescriptor:
    """Immutable identity and metadata of a registered case."""

    __test__ = False

    qualified_name: str
    method_name: str
    authors: tuple[str, ...] = (DEFAULT_AUTHOR,)
    categories: frozenset[CategoryType] = frozenset({CategoryType.REGRESSION})

    @property
    def sorted_categories(self) -> tuple[CategoryType, ...]:
        order = list(CategoryType)
        return tuple(sorted(self.categories, key=order.index))


CaseFunction = Callable[["CaseContext"], Any]


@dataclass(frozen=True)
class RegisteredCase:
    """A case body paired with its descriptor."""

    descriptor: TestCaseDescriptor
    fn: CaseFunction = field(compare=False)

    @property
    def name(self) -> str:
        return self.descriptor.method_name
