"""Response assertion predicates that report one step per check."""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from collections.abc import Mapping, Sequence
from typing import Any

from simple_api_tester.reporting import ReporterHandle, StepLevel
from simple_api_tester.request_dispatch import ResponseRecord

from .json_search import parse_json_body, resolve_json_path, search_json_values, value_text

MAX_LIMIT_MS = 2000

Body = ResponseRecord | str | bytes


class AssertionKit:
    """Evaluates response predicates against one case node.

    Every predicate call emits exactly one Pass or Fail step and returns a bool.
    Failed checks are remembered in :attr:`failures` so the case runner can fail
    the iteration once the case body returns.
    """

    def __init__(self, handle: ReporterHandle, *, max_limit_ms: int = MAX_LIMIT_MS) -> None:
        self._handle = handle
        self.max_limit_ms = max_limit_ms
        self.failures: list[str] = []

    def status_equals(self, response: ResponseRecord, expected: int) -> bool:
        actual = response.status_code
        if actual == expected:
            return self._pass(f"Status code is {expected}")
        return self._fail(
            f"Status code mismatch. Expected: {expected}, Actual: {actual}", response.text
        )

    def body_equals(self, response: Body, expected: str) -> bool:
        actual = _body_text(response).strip()
        if actual == expected.strip():
            return self._pass("Response body matches the expected text")
        return self._fail(f"Response body differs from expected '{expected.strip()}'", actual)

    def body_empty(self, response: Body) -> bool:
        actual = _body_text(response)
        if not actual.strip():
            return self._pass("Response body is empty")
        return self._fail("Response body is not empty", actual)

    def body_contains(self, response: Body, expected: str) -> bool:
        actual = _body_text(response)
        if expected in actual:
            return self._pass(f"Response body contains text: '{expected}'")
        return self._fail(
            f"Response body does not contain the expected text: '{expected}'", actual
        )

    def content_type_starts_with(self, response: ResponseRecord, expected: str) -> bool:
        actual = response.content_type or ""
        if actual.lower().startswith(expected.lower()):
            return self._pass(f"Content-Type starts with '{expected}'. Actual: '{actual}'")
        return self._fail(
            f"Content-Type mismatch. Expected to start with: '{expected}', Actual: '{actual}'"
        )

    def header_equals(self, response: ResponseRecord, name: str, expected: str) -> bool:
        actual = response.header(name)
        if actual is not None and actual == expected:
            return self._pass(f"Header '{name}' has value: '{expected}'")
        return self._fail(
            f"Header '{name}' value mismatch. Expected: '{expected}', Actual: '{actual}'"
        )

    def json_key_search(self, key: str, expected: Any, response: Body) -> bool:
        """Pass when `expected` is among the values stored under `key` anywhere in the body."""
        problem = self._response_problem(response)
        if problem:
            return self._fail(problem, _body_text(response))
        try:
            found = search_json_values(parse_json_body(_body_bytes(response)), key)
        except json.JSONDecodeError as exc:
            return self._fail(f"Response body is not valid JSON: {exc}", _body_text(response))
        wanted = value_text(expected)
        if wanted in found:
            return self._pass(f"'{key}' has value '{wanted}'")
        return self._fail(f"'{key}' does not have value '{wanted}'. Found: {found}")

    def json_multi_verify(self, response: Body, expected: Mapping[str, Any]) -> bool:
        """Check several keys at once; a list of expected values must all be present."""
        problem = self._response_problem(response)
        if problem:
            return self._fail(problem, _body_text(response))
        try:
            document = parse_json_body(_body_bytes(response))
        except json.JSONDecodeError as exc:
            return self._fail(f"Response body is not valid JSON: {exc}", _body_text(response))

        missing: list[str] = []
        for key, wanted in expected.items():
            found = search_json_values(document, key)
            candidates = wanted if _is_value_list(wanted) else [wanted]
            for candidate in candidates:
                text = value_text(candidate)
                if text not in found:
                    missing.append(f"{key}={text}")
        if missing:
            return self._fail("JSON values not found: " + ", ".join(missing))
        return self._pass("All expected JSON values found: " + ", ".join(expected))

    def json_path_equals(self, response: Body, path: str, expected: Any) -> bool:
        problem = self._response_problem(response)
        if problem:
            return self._fail(problem, _body_text(response))
        try:
            actual = resolve_json_path(parse_json_body(_body_bytes(response)), path)
        except json.JSONDecodeError as exc:
            return self._fail(f"Response body is not valid JSON: {exc}", _body_text(response))
        except KeyError:
            return self._fail(f"JSON path '{path}' not found", _body_text(response))
        if actual == expected:
            return self._pass(f"JSON path '{path}' has value: '{value_text(expected)}'")
        return self._fail(
            f"JSON path '{path}' mismatch. Expected: '{value_text(expected)}', "
            f"Actual: '{value_text(actual)}'"
        )

    def xml_tag_attribute_contains(
        self, response: Body, tag: str, child_tag: str, expected: str
    ) -> bool:
        """Every `tag` element's first `child_tag` text must contain `expected`, ignoring case."""
        problem = self._response_problem(response)
        if problem:
            return self._fail(problem, _body_text(response))
        try:
            root = ET.fromstring(_body_bytes(response))
        except ET.ParseError as exc:
            return self._fail(f"Response body is not valid XML: {exc}", _body_text(response))

        elements = [element for element in root.iter() if _local_name(element.tag) == tag]
        if not elements:
            return self._fail(f"No <{tag}> elements found in response")
        values = [_first_child_text(element, child_tag) for element in elements]
        mismatched = [value for value in values if expected.lower() not in value.lower()]
        if mismatched:
            return self._fail(
                f"<{tag}>/<{child_tag}> values not containing '{expected}': {mismatched}"
            )
        return self._pass(f"All {len(values)} <{tag}>/<{child_tag}> values contain '{expected}'")

    def xml_list_empty(self, response: Body, tag: str) -> bool:
        problem = self._response_problem(response)
        if problem:
            return self._fail(problem, _body_text(response))
        try:
            root = ET.fromstring(_body_bytes(response))
        except ET.ParseError as exc:
            return self._fail(f"Response body is not valid XML: {exc}", _body_text(response))

        element = next(
            (candidate for candidate in root.iter() if _local_name(candidate.tag) == tag), None
        )
        if element is None:
            return self._fail(f"<{tag}> element not found in response")
        if len(element):
            return self._fail(f"<{tag}> has {len(element)} child elements; expected none")
        return self._pass(f"<{tag}> list is empty")

    def _response_problem(self, response: Body) -> str | None:
        if not isinstance(response, ResponseRecord):
            return None
        if response.status_code != 200:
            return f"Status code mismatch. Expected: 200, Actual: {response.status_code}"
        if response.elapsed_ms >= self.max_limit_ms:
            return (
                f"Response time {response.elapsed_ms} ms exceeds the limit of "
                f"{self.max_limit_ms} ms"
            )
        return None

    def _pass(self, message: str) -> bool:
        self._handle.passed(f"Assertion PASSED: {message}")
        return True

    def _fail(self, message: str, body: str | None = None) -> bool:
        self.failures.append(message)
        self._handle.step(StepLevel.FAIL, f"Assertion FAILED: {message}", body)
        return False


def _body_bytes(response: Body) -> bytes:
    if isinstance(response, ResponseRecord):
        return response.body
    if isinstance(response, str):
        return response.encode("utf-8")
    return response


def _body_text(response: Body) -> str:
    return _body_bytes(response).decode("utf-8", errors="replace")


def _is_value_list(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, str | bytes)


def _local_name(tag: Any) -> str:
    text = tag if isinstance(tag, str) else ""
    return text.rsplit("}", 1)[-1]


def _first_child_text(element: ET.Element, child_tag: str) -> str:
    for child in element:
        if _local_name(child.tag) == child_tag:
            return (child.text or "").strip()
    return ""
