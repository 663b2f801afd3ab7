"""JSON value search helpers."""

from __future__ import annotations

import json
import re
from typing import Any

_PATH_TOKEN = re.compile(r"([^.\[\]]+)|\[(\d+)\]")


def value_text(value: Any) -> str:
    """String form used for comparisons: strings stay raw, anything else is compact JSON."""
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def search_json_values(document: Any, key: str) -> list[str]:
    """Collect the string form of every value stored under `key`, at any depth."""
    found: list[str] = []
    _collect(document, key, found)
    return found


def parse_json_body(body: str | bytes) -> Any:
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
    return json.loads(text)


def resolve_json_path(document: Any, path: str) -> Any:
    """Follow a dotted path such as `entry[0].resource.id`; raises KeyError when absent."""
    current = document
    for name, index in _PATH_TOKEN.findall(path.removeprefix("$.")):
        if name:
            if not isinstance(current, dict) or name not in current:
                raise KeyError(path)
            current = current[name]
        else:
            position = int(index)
            if not isinstance(current, list) or position >= len(current):
                raise KeyError(path)
            current = current[position]
    return current


def _collect(node: Any, key: str, found: list[str]) -> None:
    if isinstance(node, dict):
        for field_name, value in node.items():
            if field_name == key:
                found.append(value_text(value))
            _collect(value, key, found)
    elif isinstance(node, list):
        for item in node:
            _collect(item, key, found)
