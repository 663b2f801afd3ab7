"""Request and response entities."""

from __future__ import annotations

import base64
import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol


class AuthDescriptor(Protocol):
    """Applies credentials to outgoing headers or query parameters."""

    def apply(self, headers: dict[str, str], params: dict[str, Any]) -> None: ...

    def describe(self) -> str: ...


@dataclass(frozen=True)
class NoAuth:
    def apply(self, headers: dict[str, str], params: dict[str, Any]) -> None:
        return None

    def describe(self) -> str:
        return "none"


@dataclass(frozen=True)
class BasicAuth:
    """Preemptive basic authentication."""

    username: str
    password: str = field(repr=False)

    def apply(self, headers: dict[str, str], params: dict[str, Any]) -> None:
        credentials = f"{self.username}:{self.password}".encode()
        headers["Authorization"] = "Basic " + base64.b64encode(credentials).decode("ascii")

    def describe(self) -> str:
        return f"basic ({self.username})"


@dataclass(frozen=True)
class BearerAuth:
    token: str | None = field(default=None, repr=False)

    def apply(self, headers: dict[str, str], params: dict[str, Any]) -> None:
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

    def describe(self) -> str:
        return "bearer" if self.token else "bearer (no token)"


@dataclass(frozen=True)
class ApiKeyAuth:
    name: str
    value: str = field(repr=False)
    location: str = "header"

    def apply(self, headers: dict[str, str], params: dict[str, Any]) -> None:
        if self.location == "query":
            params[self.name] = self.value
        else:
            headers[self.name] = self.value

    def describe(self) -> str:
        return f"api key ({self.location}: {self.name})"


@dataclass(frozen=True)
class RequestPlan:
    """One fully resolved request, consumed by a single send."""

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None
    auth: AuthDescriptor = field(default_factory=NoAuth)
    params: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ResponseRecord:
    """Captured response of one request."""

    status_code: int
    headers: Mapping[str, str]
    body: bytes
    elapsed_ms: int
    content_type: str = ""

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.text)

    def header(self, name: str) -> str | None:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None
