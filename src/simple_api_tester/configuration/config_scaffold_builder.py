"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

from .config_keys import REQUIRED_KEYS, ConfigKey

DEFAULT_CONFIG_FILENAME = "config.properties"

_HEADER = """# Run configuration template for simple-api-tester.
# Replace every <REQUIRED> placeholder before running.
# Remove <OPTIONAL> lines your setup does not need; blank values count as absent.
# Flags take yes/no. Headers use "Name: value" pairs separated by ';'.
"""

_SECTIONS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Run", ("env", "run_mode", "runmanager", "service_name")),
    ("Services", ()),
    (
        "Authentication",
        (
            "auth_type",
            "bearer_token",
            "api_key_name",
            "api_key_value",
            "api_key_location",
            "access_token_url",
            "client_id",
            "client_secret",
            "scope",
        ),
    ),
    (
        "Execution",
        (
            "retry",
            "retry_max_attempts",
            "log_response",
            "override_reports",
            "relaxed_tls",
            "request_timeout_seconds",
        ),
    ),
    (
        "Email summary",
        (
            "send_email",
            "email_host",
            "email_port",
            "email_username",
            "email_password",
            "email_use_ssl",
            "email_from",
            "email_to_recipients",
            "email_cc_recipients",
            "email_subject",
        ),
    ),
    ("Database", ("db_url", "db_username", "db_password")),
)

_HINTS = {
    "run_mode": "local|remote",
    "auth_type": "basic|bearer|api_key|oauth2|none",
    "api_key_location": "header|query",
}


def build_placeholder_configuration() -> str:
    """Build a `.properties` run configuration with one line per known key."""
    required = {key.value for key in REQUIRED_KEYS}
    lines = [_HEADER]
    for title, names in _SECTIONS:
        lines.append(f"# {title}")
        keys = names or tuple(
            key.value for key in ConfigKey if key.value.startswith("open_")
        )
        for name in keys:
            is_required = name in required or _is_service_credential(name)
            marker = "<REQUIRED>" if is_required else "<OPTIONAL>"
            hint = _HINTS.get(name)
            if hint:
                lines.append(f"# {name}: {hint}")
            lines.append(f"{name}={marker}")
        lines.append("")
    return "\n".join(lines)


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the placeholder configuration to the requested output path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()


def _is_service_credential(name: str) -> bool:
    return name.startswith("open_") and not name.endswith("_headers")
