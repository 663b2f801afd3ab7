"""HTTP request dispatch service."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import requests

from simple_api_tester.configuration import ConfigKey, RunContext
from simple_api_tester.harness_errors import ErrorKind, HarnessError
from simple_api_tester.reporting import ReporterHandle

from .oauth_tokens import BearerTokenStore, OAuthTokenProvider
from .request_models import (
    ApiKeyAuth,
    AuthDescriptor,
    BasicAuth,
    BearerAuth,
    NoAuth,
    RequestPlan,
    ResponseRecord,
)
from .service_profiles import Service, ServiceProfile, resolve_service_profile

logger = logging.getLogger(__name__)

INVALID_USERNAME = "Test"
INVALID_PASSWORD = "Test12"
INVALID_HEADERS = {
    "X-Custom-Invalid-Header": "unexpectedValue",
    "Content-Type": "application/unknown",
}
AUTH_TYPES = ("basic", "bearer", "api_key", "oauth2", "none")


class RequestDispatcher:
    """Resolves service profiles, applies auth and sends requests for test cases."""

    def __init__(
        self,
        context: RunContext,
        *,
        session: requests.Session | None = None,
        token_store: BearerTokenStore | None = None,
    ) -> None:
        self._context = context
        self._session = session or requests.Session()
        self._token_store = token_store or BearerTokenStore()
        self._token_provider = OAuthTokenProvider(context, self._session, self._token_store)
        self._profiles: dict[Service, ServiceProfile] = {}

    @property
    def token_provider(self) -> OAuthTokenProvider:
        return self._token_provider

    def profile(self, service: Service) -> ServiceProfile:
        profile = self._profiles.get(service)
        if profile is None:
            profile = resolve_service_profile(self._context.registry, service)
            self._profiles[service] = profile
        return profile

    def build_url(self, service: Service, path_template: str = "", *args: Any) -> str:
        """Join the service base URL with a `%s` path template filled with quoted args."""
        path = path_template
        if args:
            path = path_template % tuple(quote(str(arg), safe="") for arg in args)
        base_url = self.profile(service).base_url
        if not path:
            return base_url
        return f"{base_url}/{path.lstrip('/')}"

    def auth_for(self, service: Service | None) -> AuthDescriptor:
        """Pick the auth descriptor configured by `auth_type` for a service."""
        auth_type = self._context.registry.get(ConfigKey.AUTH_TYPE).lower()
        if auth_type not in AUTH_TYPES:
            raise HarnessError(
                ErrorKind.MISSING_CONFIG,
                f"auth_type must be one of {', '.join(AUTH_TYPES)}; got '{auth_type}'.",
            )
        if auth_type == "none":
            return NoAuth()
        if auth_type == "basic":
            if service is None:
                return NoAuth()
            profile = self.profile(service)
            return BasicAuth(profile.username, profile.password)
        if auth_type == "api_key":
            registry = self._context.registry
            return ApiKeyAuth(
                name=registry.get(ConfigKey.API_KEY_NAME),
                value=registry.get(ConfigKey.API_KEY_VALUE),
                location=(registry.find(ConfigKey.API_KEY_LOCATION) or "header").lower(),
            )
        token = None
        if auth_type == "bearer":
            token = self._context.registry.find(ConfigKey.BEARER_TOKEN)
        if token is None:
            token = self._token_provider.current_token()
        if token is None:
            logger.error("authentication failed: no bearer token available")
        return BearerAuth(token)

    def plan(
        self,
        method: str,
        service: Service | None,
        path: str,
        *,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        auth: AuthDescriptor | None = None,
    ) -> RequestPlan:
        if path.startswith(("http://", "https://")):
            url = path
        elif service is None:
            raise ValueError(f"A service is required for relative path '{path}'.")
        else:
            url = self.build_url(service, path)
        merged_headers: dict[str, str] = {}
        if service is not None:
            merged_headers.update(self.profile(service).default_headers)
        if isinstance(body, dict | list):
            merged_headers.setdefault("Content-Type", "application/json")
        merged_headers.update(headers or {})
        return RequestPlan(
            method=method.upper(),
            url=url,
            headers=merged_headers,
            body=body,
            auth=auth if auth is not None else self.auth_for(service),
            params=dict(params or {}),
        )

    def send(self, plan: RequestPlan, handle: ReporterHandle) -> ResponseRecord:
        """Send one plan, logging the request, status and timing to the case node."""
        handle.log_request(plan)
        headers = dict(plan.headers)
        params = dict(plan.params)
        plan.auth.apply(headers, params)
        body_arguments: dict[str, Any] = {}
        if isinstance(plan.body, dict | list):
            body_arguments["json"] = plan.body
        elif plan.body is not None:
            body_arguments["data"] = plan.body

        started = time.perf_counter()
        try:
            response = self._session.request(
                plan.method,
                plan.url,
                headers=headers,
                params=params or None,
                verify=not self._context.relaxed_tls,
                timeout=self._context.request_timeout_seconds,
                **body_arguments,
            )
        except requests.RequestException as exc:
            raise HarnessError(
                ErrorKind.TRANSPORT, f"{plan.method} {plan.url} failed: {exc}"
            ) from exc
        elapsed_ms = int((time.perf_counter() - started) * 1000)

        record = ResponseRecord(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=response.content or b"",
            elapsed_ms=elapsed_ms,
            content_type=response.headers.get("Content-Type", ""),
        )
        handle.info(f"Received response with status code: {record.status_code}")
        handle.info(f"Response Time : {record.elapsed_ms} (ms)")
        if self._context.log_responses:
            handle.log_response(record)
        return record

    def request(
        self,
        method: str,
        service: Service | None,
        path: str,
        handle: ReporterHandle,
        **options: Any,
    ) -> ResponseRecord:
        return self.send(self.plan(method, service, path, **options), handle)

    def get(
        self, service: Service | None, path: str, handle: ReporterHandle, **options: Any
    ) -> ResponseRecord:
        return self.request("GET", service, path, handle, **options)

    def post(
        self, service: Service | None, path: str, handle: ReporterHandle, **options: Any
    ) -> ResponseRecord:
        return self.request("POST", service, path, handle, **options)

    def put(
        self, service: Service | None, path: str, handle: ReporterHandle, **options: Any
    ) -> ResponseRecord:
        return self.request("PUT", service, path, handle, **options)

    def patch(
        self, service: Service | None, path: str, handle: ReporterHandle, **options: Any
    ) -> ResponseRecord:
        return self.request("PATCH", service, path, handle, **options)

    def delete(
        self, service: Service | None, path: str, handle: ReporterHandle, **options: Any
    ) -> ResponseRecord:
        return self.request("DELETE", service, path, handle, **options)

    def request_with_invalid_credentials(
        self, url: str, handle: ReporterHandle, *, method: str = "GET"
    ) -> bool:
        """Send with bogus basic credentials; True when the service answers 401."""
        plan = RequestPlan(
            method=method.upper(),
            url=url,
            auth=BasicAuth(INVALID_USERNAME, INVALID_PASSWORD),
        )
        return self.send(plan, handle).status_code == 401

    def request_with_invalid_header(
        self, url: str, service: Service, handle: ReporterHandle, *, method: str = "GET"
    ) -> ResponseRecord:
        """Send with the service credentials plus unexpected headers; return the raw response."""
        profile = self.profile(service)
        plan = RequestPlan(
            method=method.upper(),
            url=url,
            headers=dict(INVALID_HEADERS),
            auth=BasicAuth(profile.username, profile.password),
        )
        return self.send(plan, handle)
