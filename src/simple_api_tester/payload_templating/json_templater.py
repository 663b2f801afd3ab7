"""JSON template substitution service."""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from simple_api_tester.harness_errors import ErrorKind, HarnessError

logger = logging.getLogger(__name__)

JSON_INDENT = 2


def generate_document(template: Any, replacements: Mapping[str, Any]) -> dict[str, Any]:
    """Replace every field whose name is a replacement key, starting from an object root.

    A matched field is overwritten wholesale with the JSON form of the replacement,
    including arrays. Objects and arrays under unmatched fields are searched further.
    Primitives inside arrays have no field name and are left untouched.
    """
    if not isinstance(template, dict):
        raise HarnessError(ErrorKind.TEMPLATING, "Payload template root must be a JSON object.")
    document = copy.deepcopy(template)
    _replace_in_object(document, _to_json_tree(dict(replacements)))
    return document


def update_document(template: Any, replacements: Mapping[str, Any]) -> Any:
    """Replace matched fields anywhere in a document of any root type.

    Traversal stops at a matched field; the inserted value is not searched again.
    """
    document = copy.deepcopy(template)
    _replace_in_node(document, _to_json_tree(dict(replacements)))
    return document


def render_json(document: Any) -> str:
    """Pretty-print a document with two-space indentation in field order."""
    return json.dumps(document, indent=JSON_INDENT, ensure_ascii=False)


def load_template(template_path: Path | str) -> Any:
    path = Path(template_path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise HarnessError(
            ErrorKind.TEMPLATING, f"Failed to read payload template {path}: {exc}"
        ) from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise HarnessError(
            ErrorKind.TEMPLATING, f"Malformed JSON in payload template {path}: {exc}"
        ) from exc


def write_document(document: Any, output_path: Path | str) -> str:
    """Write a document as pretty JSON and return the written text."""
    path = Path(output_path)
    rendered = render_json(document)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(rendered, encoding="utf-8")
    except OSError as exc:
        raise HarnessError(
            ErrorKind.TEMPLATING, f"Failed to write payload {path}: {exc}"
        ) from exc
    logger.debug("Payload written to %s", path)
    return rendered


def render_payload(template_path: Path | str, replacements: Mapping[str, Any]) -> str:
    """Apply the generate strategy to a template file and return the JSON text."""
    return render_json(generate_document(load_template(template_path), replacements))


def generate_payload(
    template_path: Path | str, output_path: Path | str, replacements: Mapping[str, Any]
) -> str:
    document = generate_document(load_template(template_path), replacements)
    return write_document(document, output_path)


def update_payload(
    template_path: Path | str, output_path: Path | str, replacements: Mapping[str, Any]
) -> str:
    document = update_document(load_template(template_path), replacements)
    return write_document(document, output_path)


def _replace_in_object(node: dict[str, Any], replacements: Mapping[str, Any]) -> None:
    for key in list(node):
        if key in replacements:
            node[key] = copy.deepcopy(replacements[key])
            continue
        value = node[key]
        if isinstance(value, dict):
            _replace_in_object(value, replacements)
        elif isinstance(value, list):
            _replace_in_array(value, replacements)


def _replace_in_array(items: list[Any], replacements: Mapping[str, Any]) -> None:
    for item in items:
        if isinstance(item, dict):
            _replace_in_object(item, replacements)
        elif isinstance(item, list):
            _replace_in_array(item, replacements)


def _replace_in_node(node: Any, replacements: Mapping[str, Any]) -> None:
    if isinstance(node, dict):
        for key in list(node):
            if key in replacements:
                node[key] = copy.deepcopy(replacements[key])
            else:
                _replace_in_node(node[key], replacements)
    elif isinstance(node, list):
        for item in node:
            if isinstance(item, dict | list):
                _replace_in_node(item, replacements)


def _to_json_tree(value: Any) -> Any:
    try:
        return json.loads(json.dumps(value, default=str))
    except (TypeError, ValueError) as exc:
        raise HarnessError(
            ErrorKind.TEMPLATING, f"Replacement values are not JSON encodable: {exc}"
        ) from exc
