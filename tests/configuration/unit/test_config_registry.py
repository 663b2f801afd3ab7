"""Configuration registry tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from simple_api_tester.configuration import ConfigKey, ConfigRegistry, load_config_registry
from simple_api_tester.configuration.config_registry import parse_properties
from simple_api_tester.harness_errors import ErrorKind, HarnessError


def test_properties_file_keys_are_lowercased_and_values_trimmed(tmp_path: Path) -> None:
    path = tmp_path / "config.properties"
    path.write_text(
        "# comment\n! other comment\nENV = QA  \nRetry=yes\nOPEN_ACTOR_BASE_URL: https://actor.example\n",
        encoding="utf-8",
    )

    registry = load_config_registry(path)

    assert registry.get(ConfigKey.ENV) == "QA"
    assert registry.get(ConfigKey.RETRY) == "yes"
    assert registry.get(ConfigKey.OPEN_ACTOR_BASE_URL) == "https://actor.example"


def test_yaml_file_is_loaded_as_flat_mapping(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("env: STAGE\nretry: yes\nrequest_timeout_seconds: 5\n", encoding="utf-8")

    registry = load_config_registry(path)

    assert registry.get("env") == "STAGE"
    assert registry.flag(ConfigKey.RETRY) is True
    assert registry.get(ConfigKey.REQUEST_TIMEOUT_SECONDS) == "5"


def test_yaml_nested_values_are_rejected(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("env:\n  name: QA\n", encoding="utf-8")

    with pytest.raises(HarnessError) as excinfo:
        load_config_registry(path)

    assert excinfo.value.kind is ErrorKind.MISSING_CONFIG


def test_missing_key_raises_missing_config() -> None:
    registry = ConfigRegistry({"env": "QA"})

    with pytest.raises(HarnessError) as excinfo:
        registry.get(ConfigKey.CLIENT_ID)

    assert excinfo.value.kind is ErrorKind.MISSING_CONFIG
    assert "client_id" in str(excinfo.value)


def test_unknown_key_name_is_rejected() -> None:
    with pytest.raises(HarnessError) as excinfo:
        ConfigKey.parse("not_a_key")

    assert excinfo.value.kind is ErrorKind.MISSING_CONFIG


def test_key_names_resolve_case_insensitively() -> None:
    registry = ConfigRegistry({"LOG_RESPONSE": "Yes"})

    assert ConfigKey.parse("Log_Response") is ConfigKey.LOG_RESPONSE
    assert registry.flag("LOG_RESPONSE") is True


def test_find_returns_none_for_absent_or_blank_optional_keys() -> None:
    registry = ConfigRegistry({"db_url": "  ", "scope": "read"})

    assert registry.find(ConfigKey.DB_URL) is None
    assert registry.find(ConfigKey.DB_USERNAME) is None
    assert registry.find(ConfigKey.SCOPE) == "read"


def test_require_lists_every_missing_key() -> None:
    registry = ConfigRegistry({"env": "QA"})

    with pytest.raises(HarnessError) as excinfo:
        registry.require((ConfigKey.ENV, ConfigKey.RETRY, ConfigKey.SCOPE))

    assert "retry" in excinfo.value.message
    assert "scope" in excinfo.value.message
    assert "env" not in excinfo.value.message.split(": ", 1)[1]


def test_missing_configuration_file_raises(tmp_path: Path) -> None:
    with pytest.raises(HarnessError) as excinfo:
        load_config_registry(tmp_path / "absent.properties")

    assert excinfo.value.kind is ErrorKind.MISSING_CONFIG


def test_parse_properties_supports_line_continuations() -> None:
    values = parse_properties("email_to_recipients=a@example.com,\\\n    b@example.com\n")

    assert values["email_to_recipients"] == "a@example.com,b@example.com"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("env QA\n", {"env": "QA"}),
        ("env\tQA\n", {"env": "QA"}),
        ("env : QA\n", {"env": "QA"}),
        ("client\\ id = a\\=b\\:c\n", {"client id": "a=b:c"}),
        ("scope=r\\u00e9ad\n", {"scope": "r\u00e9ad"}),
        ("retry\n", {"retry": ""}),
    ],
)
def test_parse_properties_follows_java_properties_syntax(
    text: str, expected: dict[str, str]
) -> None:
    assert parse_properties(text) == expected


def test_whitespace_separated_properties_file_loads(tmp_path: Path) -> None:
    path = tmp_path / "config.properties"
    path.write_text("env QA\nretry   yes\n", encoding="utf-8")

    registry = load_config_registry(path)

    assert registry.get(ConfigKey.ENV) == "QA"
    assert registry.flag(ConfigKey.RETRY) is True


def test_malformed_unicode_escape_raises_missing_config() -> None:
    with pytest.raises(HarnessError) as excinfo:
        parse_properties("scope=\\uZZZZ\n")

    assert excinfo.value.kind is ErrorKind.MISSING_CONFIG
