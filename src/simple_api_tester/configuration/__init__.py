"""Configuration domain exports."""

from .config_keys import REQUIRED_KEYS, SECRET_KEYS, ConfigKey
from .config_registry import ConfigRegistry, load_config_registry, parse_properties
from .config_scaffold_builder import (
    DEFAULT_CONFIG_FILENAME,
    build_placeholder_configuration,
    write_placeholder_configuration,
)
from .run_context import RunContext, build_run_context

__all__ = [
    "ConfigKey",
    "REQUIRED_KEYS",
    "SECRET_KEYS",
    "ConfigRegistry",
    "load_config_registry",
    "parse_properties",
    "RunContext",
    "build_run_context",
    "DEFAULT_CONFIG_FILENAME",
    "build_placeholder_configuration",
    "write_placeholder_configuration",
]
