"""OAuth2 client-credentials token provider."""

from __future__ import annotations

import logging
import threading

import requests

from simple_api_tester.configuration import ConfigKey, RunContext

logger = logging.getLogger(__name__)


class BearerTokenStore:
    """The current bearer token of a run, published once by the token provider."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._token: str | None = None
        self._attempted = False

    @property
    def lock(self) -> threading.Lock:
        return self._lock

    @property
    def attempted(self) -> bool:
        return self._attempted

    def current(self) -> str | None:
        return self._token

    def publish(self, token: str | None) -> None:
        self._token = token
        self._attempted = True


class OAuthTokenProvider:
    """Fetches client-credentials tokens from the configured token endpoint."""

    def __init__(
        self,
        context: RunContext,
        session: requests.Session,
        token_store: BearerTokenStore,
    ) -> None:
        self._context = context
        self._session = session
        self._store = token_store

    def fetch_token(self) -> str | None:
        """Request a new token; publish and return it on HTTP 200, else None."""
        registry = self._context.registry
        try:
            response = self._session.post(
                registry.get(ConfigKey.ACCESS_TOKEN_URL),
                auth=(registry.get(ConfigKey.CLIENT_ID), registry.get(ConfigKey.CLIENT_SECRET)),
                data={"grant_type": "client_credentials", "scope": registry.get(ConfigKey.SCOPE)},
                verify=not self._context.relaxed_tls,
                timeout=self._context.request_timeout_seconds,
            )
        except requests.RequestException as exc:
            logger.error("Authentication request failed: %s", exc)
            self._store.publish(None)
            return None

        if response.status_code != 200:
            logger.error("Authentication failed with status code: %s", response.status_code)
            self._store.publish(None)
            return None
        try:
            token = response.json().get("access_token")
        except (ValueError, AttributeError):
            token = None
        if not token:
            logger.error("Authentication response did not contain an access_token")
            self._store.publish(None)
            return None
        self._store.publish(str(token))
        logger.info("Access token obtained from %s", registry.get(ConfigKey.ACCESS_TOKEN_URL))
        return str(token)

    def current_token(self) -> str | None:
        """Return the published token, fetching it at most once per run."""
        token = self._store.current()
        if token is not None or self._store.attempted:
            return token
        with self._store.lock:
            if not self._store.attempted:
                return self.fetch_token()
            return self._store.current()
