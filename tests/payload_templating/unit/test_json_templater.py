"""JSON templater tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from simple_api_tester.harness_errors import ErrorKind, HarnessError
from simple_api_tester.payload_templating import (
    generate_document,
    generate_payload,
    load_template,
    render_json,
    render_payload,
    update_document,
    update_payload,
)


def _write_template(tmp_path: Path, document: object, name: str = "template.json") -> Path:
    path = tmp_path / name
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


def test_generate_replaces_every_occurrence_of_a_key() -> None:
    template = {"a": 1, "b": {"c": 2, "d": [{"c": 3}]}}

    document = generate_document(template, {"c": 9})

    assert document == {"a": 1, "b": {"c": 9, "d": [{"c": 9}]}}
    assert template == {"a": 1, "b": {"c": 2, "d": [{"c": 3}]}}


def test_generate_with_empty_replacements_keeps_document() -> None:
    template = {"resourceType": "Appointment", "participant": [{"actor": {"reference": "Patient/1"}}]}

    document = generate_document(template, {})

    assert render_json(document) == render_json(template)


def test_generate_replaces_arrays_wholesale() -> None:
    template = {"tags": ["old"], "nested": {"tags": [{"id": 1}]}}

    document = generate_document(template, {"tags": ["new", "values"]})

    assert document == {"tags": ["new", "values"], "nested": {"tags": ["new", "values"]}}


def test_generate_does_not_search_inside_inserted_values() -> None:
    template = {"outer": {"outer": 1}}

    document = generate_document(template, {"outer": {"outer": "x"}})

    assert document == {"outer": {"outer": "x"}}


def test_generate_leaves_primitives_inside_arrays_untouched() -> None:
    template = {"codes": ["c", "d"], "c": 1}

    document = generate_document(template, {"c": 2})

    assert document == {"codes": ["c", "d"], "c": 2}


def test_generate_requires_object_root() -> None:
    with pytest.raises(HarnessError) as excinfo:
        generate_document([{"c": 1}], {"c": 2})

    assert excinfo.value.kind is ErrorKind.TEMPLATING


def test_update_accepts_array_root() -> None:
    document = update_document([{"c": 1}, {"d": {"c": 2}}], {"c": "x"})

    assert document == [{"c": "x"}, {"d": {"c": "x"}}]


def test_replacement_values_are_json_encoded() -> None:
    document = generate_document({"when": None}, {"when": Path("slot")})

    assert document == {"when": "slot"}


def test_render_json_uses_two_space_indentation() -> None:
    assert render_json({"a": {"b": 1}}) == '{\n  "a": {\n    "b": 1\n  }\n}'


def test_generate_payload_writes_pretty_output(tmp_path: Path) -> None:
    template_path = _write_template(tmp_path, {"id": "0", "name": "n"})
    output_path = tmp_path / "out" / "payload.json"

    rendered = generate_payload(template_path, output_path, {"id": "42"})

    assert output_path.read_text(encoding="utf-8") == rendered
    assert json.loads(rendered) == {"id": "42", "name": "n"}


def test_update_payload_and_render_payload(tmp_path: Path) -> None:
    template_path = _write_template(tmp_path, {"status": "booked"})
    output_path = tmp_path / "updated.json"

    update_payload(template_path, output_path, {"status": "cancelled"})

    assert json.loads(output_path.read_text(encoding="utf-8")) == {"status": "cancelled"}
    assert json.loads(render_payload(template_path, {})) == {"status": "booked"}


def test_missing_template_raises_templating_error(tmp_path: Path) -> None:
    with pytest.raises(HarnessError) as excinfo:
        load_template(tmp_path / "absent.json")

    assert excinfo.value.kind is ErrorKind.TEMPLATING


def test_malformed_template_raises_templating_error(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(HarnessError) as excinfo:
        load_template(path)

    assert excinfo.value.kind is ErrorKind.TEMPLATING
