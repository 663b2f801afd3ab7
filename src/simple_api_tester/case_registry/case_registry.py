"""Declarative test case registry."""

from __future__ import annotations

import importlib
import sys
from collections.abc import Callable, Iterable
from pathlib import Path

from .case_models import (
    DEFAULT_AUTHOR,
    CaseFunction,
    CategoryType,
    RegisteredCase,
    TestCaseDescriptor,
)


class CaseRegistry:
    """Ordered collection of cases built at start-up.

    Cases are registered either by calling :meth:`register` or with the
    :meth:`case` decorator::

        registry = CaseRegistry()

        @registry.case(authors=("Asha",), categories=(CategoryType.SMOKE,))
        def tc001_get_patient(ctx):
            ...
    """

    def __init__(self) -> None:
        self._cases: list[RegisteredCase] = []
        self._names: set[str] = set()

    def register(
        self,
        fn: CaseFunction,
        *,
        name: str | None = None,
        authors: Iterable[str] = (),
        categories: Iterable[CategoryType | str] = (),
    ) -> RegisteredCase:
        method_name = name or fn.__name__
        if method_name.lower() in self._names:
            raise ValueError(f"Test case '{method_name}' is already registered.")
        descriptor = TestCaseDescriptor(
            qualified_name=f"{fn.__module__}.{getattr(fn, '__qualname__', method_name)}",
            method_name=method_name,
            authors=tuple(author.strip() for author in authors if author.strip())
            or (DEFAULT_AUTHOR,),
            categories=frozenset(_category(category) for category in categories)
            or frozenset({CategoryType.REGRESSION}),
        )
        registered = RegisteredCase(descriptor=descriptor, fn=fn)
        self._cases.append(registered)
        self._names.add(method_name.lower())
        return registered

    def case(
        self,
        *,
        name: str | None = None,
        authors: Iterable[str] = (),
        categories: Iterable[CategoryType | str] = (),
    ) -> Callable[[CaseFunction], CaseFunction]:
        def decorator(fn: CaseFunction) -> CaseFunction:
            self.register(fn, name=name, authors=authors, categories=categories)
            return fn

        return decorator

    def cases(self) -> list[RegisteredCase]:
        return list(self._cases)

    def __len__(self) -> int:
        return len(self._cases)


class CaseRegistryLoadError(Exception):
    """Raised when a `module:attribute` case registry reference cannot be loaded."""


def load_case_registry(
    reference: str, *, search_path: Path | str | None = None
) -> CaseRegistry:
    """Import `package.module:attribute` and return the CaseRegistry it names.

    `search_path` is prepended to `sys.path` first, so case modules outside any
    installed package can be imported.
    """
    module_name, separator, attribute = reference.partition(":")
    if not separator or not module_name or not attribute:
        raise CaseRegistryLoadError(
            f"Case registry reference must look like 'package.module:attribute': {reference}"
        )
    if search_path is not None:
        directory = str(Path(search_path).resolve())
        if directory not in sys.path:
            sys.path.insert(0, directory)
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise CaseRegistryLoadError(f"Cannot import case module '{module_name}': {exc}") from exc
    try:
        target = getattr(module, attribute)
    except AttributeError as exc:
        raise CaseRegistryLoadError(
            f"Module '{module_name}' has no attribute '{attribute}'."
        ) from exc
    if not isinstance(target, CaseRegistry) and callable(target):
        try:
            target = target()
        except Exception as exc:  # pylint: disable=broad-exception-caught
            raise CaseRegistryLoadError(
                f"Calling case registry factory '{reference}' failed: {exc}"
            ) from exc
    if not isinstance(target, CaseRegistry):
        raise CaseRegistryLoadError(f"'{reference}' does not provide a CaseRegistry.")
    return target


def _category(value: CategoryType | str) -> CategoryType:
    if isinstance(value, CategoryType):
        return value
    return CategoryType(value.strip().upper())
