"""Configuration registry loader service."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

import javaproperties
import yaml

from simple_api_tester.harness_errors import ErrorKind, HarnessError

from .config_keys import ConfigKey

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = {".yaml", ".yml", ".json"}


class ConfigRegistry:
    """Read-only view over a flat key/value configuration store."""

    def __init__(self, values: Mapping[str, Any], *, source: Path | None = None) -> None:
        normalized: dict[str, str] = {}
        for raw_key, raw_value in values.items():
            key = str(raw_key).strip().lower()
            normalized[key] = _normalize_value(raw_value)
        self._values = MappingProxyType(normalized)
        self.source = source

    def get(self, key: ConfigKey | str) -> str:
        """Return the trimmed value for `key` or raise a missing-config error."""
        resolved = key if isinstance(key, ConfigKey) else ConfigKey.parse(key)
        try:
            return self._values[resolved.value]
        except KeyError as exc:
            raise HarnessError(
                ErrorKind.MISSING_CONFIG,
                f"Property name {resolved.value} is not found. Please check config.properties",
            ) from exc

    def find(self, key: ConfigKey | str) -> str | None:
        """Return the value for an optional key, or None when absent or blank."""
        resolved = key if isinstance(key, ConfigKey) else ConfigKey.parse(key)
        value = self._values.get(resolved.value)
        return value or None

    def flag(self, key: ConfigKey | str) -> bool:
        """Interpret a required yes/no key."""
        return self.get(key).lower() == "yes"

    def optional_flag(self, key: ConfigKey | str) -> bool:
        value = self.find(key)
        return value is not None and value.lower() == "yes"

    def require(self, keys: Iterable[ConfigKey]) -> None:
        """Fail with one error listing every absent key."""
        missing = [key.value for key in keys if key.value not in self._values]
        if missing:
            raise HarnessError(
                ErrorKind.MISSING_CONFIG,
                "Missing required configuration keys: " + ", ".join(missing),
            )

    def as_dict(self) -> dict[str, str]:
        return dict(self._values)

    def __contains__(self, key: object) -> bool:
        if isinstance(key, ConfigKey):
            return key.value in self._values
        if isinstance(key, str):
            return key.strip().lower() in self._values
        return False


def load_config_registry(config_path: Path | str) -> ConfigRegistry:
    """Load a `.properties`, YAML or JSON configuration file into a registry."""
    path = Path(config_path)
    if not path.exists():
        raise HarnessError(ErrorKind.MISSING_CONFIG, f"Configuration file not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise HarnessError(
            ErrorKind.MISSING_CONFIG, f"Failed to read configuration file {path}: {exc}"
        ) from exc

    if path.suffix.lower() in _YAML_SUFFIXES:
        values = _parse_mapping_document(text)
    else:
        values = parse_properties(text)
    logger.debug("Loaded %d configuration keys from %s", len(values), path)
    return ConfigRegistry(values, source=path.resolve())


def parse_properties(text: str) -> dict[str, str]:
    """Parse a Java `.properties` document, lowercasing keys and trimming values."""
    try:
        parsed = javaproperties.loads(text)
    except ValueError as exc:
        raise HarnessError(
            ErrorKind.MISSING_CONFIG, f"Failed to parse configuration file: {exc}"
        ) from exc
    return {key.strip().lower(): value.strip() for key, value in parsed.items()}


def _parse_mapping_document(text: str) -> dict[str, Any]:
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise HarnessError(
            ErrorKind.MISSING_CONFIG, f"Failed to parse configuration file: {exc}"
        ) from exc
    if parsed is None:
        return {}
    if not isinstance(parsed, Mapping):
        raise HarnessError(ErrorKind.MISSING_CONFIG, "Configuration root must be a mapping.")
    for key, value in parsed.items():
        if isinstance(value, (Mapping, list)):
            raise HarnessError(
                ErrorKind.MISSING_CONFIG,
                f"Configuration value for '{key}' must be a scalar.",
            )
    return dict(parsed)


def _normalize_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "yes" if value else "no"
    return str(value).strip()
