"""Test case registry domain exports."""

from .case_models import (
    DEFAULT_AUTHOR,
    CaseFunction,
    CategoryType,
    RegisteredCase,
    TestCaseDescriptor,
)
from .case_registry import CaseRegistry, CaseRegistryLoadError, load_case_registry

__all__ = [
    "CategoryType",
    "TestCaseDescriptor",
    "RegisteredCase",
    "CaseFunction",
    "DEFAULT_AUTHOR",
    "CaseRegistry",
    "CaseRegistryLoadError",
    "load_case_registry",
]
