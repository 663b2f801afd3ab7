"""Response assertion domain exports."""

from .assertion_kit import MAX_LIMIT_MS, AssertionKit
from .json_search import parse_json_body, resolve_json_path, search_json_values, value_text

__all__ = [
    "AssertionKit",
    "MAX_LIMIT_MS",
    "search_json_values",
    "value_text",
    "parse_json_body",
    "resolve_json_path",
]
