"""Per-service endpoint and credential profiles."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from simple_api_tester.configuration import ConfigKey, ConfigRegistry
from simple_api_tester.harness_errors import ErrorKind, HarnessError


class Service(str, Enum):
    """Upstream services addressed by test cases."""

    ACTOR = "actor"
    CHART = "chart"
    CHC = "chc"
    CODING = "coding"
    DOCUMENT = "document"
    ERX = "erx"
    LAB = "lab"
    JOB = "job"

    def key(self, suffix: str) -> ConfigKey:
        return ConfigKey(f"open_{self.value}_{suffix}")


@dataclass(frozen=True)
class ServiceProfile:
    """Base URL, credentials and default headers of one service."""

    service: Service
    base_url: str
    username: str
    password: str = field(repr=False)
    default_headers: Mapping[str, str] = field(default_factory=dict)


def resolve_service_profile(registry: ConfigRegistry, service: Service) -> ServiceProfile:
    base_url = registry.get(service.key("base_url"))
    if not base_url:
        raise HarnessError(
            ErrorKind.MISSING_CONFIG, f"{service.key('base_url').value} must not be empty."
        )
    return ServiceProfile(
        service=service,
        base_url=base_url.rstrip("/"),
        username=registry.get(service.key("username")),
        password=registry.get(service.key("password")),
        default_headers=parse_header_list(registry.find(service.key("headers"))),
    )


def parse_header_list(raw: str | None) -> dict[str, str]:
    """Parse `Name: value; Other: value` into an ordered header mapping."""
    headers: dict[str, str] = {}
    if not raw:
        return headers
    for chunk in raw.split(";"):
        name, separator, value = chunk.partition(":")
        if not separator or not name.strip():
            if chunk.strip():
                raise HarnessError(
                    ErrorKind.MISSING_CONFIG, f"Malformed header entry '{chunk.strip()}'."
                )
            continue
        headers[name.strip()] = value.strip()
    return headers
