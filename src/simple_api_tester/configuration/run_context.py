"""Per-run configuration context."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from simple_api_tester.harness_errors import ErrorKind, HarnessError

from .config_keys import REQUIRED_KEYS, ConfigKey
from .config_registry import ConfigRegistry

DEFAULT_MAX_ATTEMPTS = 2
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30
RUN_MODES = ("local", "remote")


@dataclass(frozen=True)
class RunContext:  # pylint: disable=too-many-instance-attributes
    """Immutable values shared by every component during one run."""

    registry: ConfigRegistry
    environment: str
    run_mode: str
    run_manager: str
    service_name: str
    resources_dir: Path
    report_dir: Path
    run_timestamp: datetime
    retry_enabled: bool
    max_attempts: int
    log_responses: bool
    override_reports: bool
    relaxed_tls: bool
    request_timeout_seconds: int

    @property
    def testdata_dir(self) -> Path:
        return self.resources_dir / "testdata"

    @property
    def is_local(self) -> bool:
        return self.run_mode == "local"


def build_run_context(
    registry: ConfigRegistry,
    *,
    resources_dir: Path | str,
    report_dir: Path | str,
    run_manager: str | None = None,
    service_name: str | None = None,
    now: datetime | None = None,
) -> RunContext:
    """Validate required keys and freeze them into a RunContext."""
    registry.require(REQUIRED_KEYS)

    run_mode = registry.get(ConfigKey.RUN_MODE).lower()
    if run_mode not in RUN_MODES:
        raise HarnessError(
            ErrorKind.MISSING_CONFIG,
            f"run_mode must be one of {', '.join(RUN_MODES)}; got '{run_mode}'.",
        )

    return RunContext(
        registry=registry,
        environment=registry.get(ConfigKey.ENV),
        run_mode=run_mode,
        run_manager=_explicit_or_configured(registry, run_manager, ConfigKey.RUNMANAGER),
        service_name=_explicit_or_configured(registry, service_name, ConfigKey.SERVICE_NAME),
        resources_dir=Path(resources_dir),
        report_dir=Path(report_dir),
        run_timestamp=now or datetime.now().astimezone(),
        retry_enabled=registry.flag(ConfigKey.RETRY),
        max_attempts=_positive_int(
            registry, ConfigKey.RETRY_MAX_ATTEMPTS, DEFAULT_MAX_ATTEMPTS
        ),
        log_responses=registry.flag(ConfigKey.LOG_RESPONSE),
        override_reports=registry.flag(ConfigKey.OVERRIDE_REPORTS),
        relaxed_tls=registry.optional_flag(ConfigKey.RELAXED_TLS),
        request_timeout_seconds=_positive_int(
            registry, ConfigKey.REQUEST_TIMEOUT_SECONDS, DEFAULT_REQUEST_TIMEOUT_SECONDS
        ),
    )


def _explicit_or_configured(
    registry: ConfigRegistry, explicit: str | None, key: ConfigKey
) -> str:
    if explicit and explicit.strip():
        return explicit.strip()
    return registry.get(key)


def _positive_int(registry: ConfigRegistry, key: ConfigKey, default: int) -> int:
    raw = registry.find(key)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise HarnessError(ErrorKind.MISSING_CONFIG, f"{key.value} must be an integer.") from exc
    if value <= 0:
        raise HarnessError(ErrorKind.MISSING_CONFIG, f"{key.value} must be greater than zero.")
    return value
