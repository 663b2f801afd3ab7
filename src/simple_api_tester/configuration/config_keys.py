"""Closed set of configuration keys."""

from __future__ import annotations

from enum import Enum

from simple_api_tester.harness_errors import ErrorKind, HarnessError


class ConfigKey(str, Enum):
    """Symbolic configuration names; each value is the lowercase property key."""

    ENV = "env"
    RUN_MODE = "run_mode"
    RUNMANAGER = "runmanager"
    SERVICE_NAME = "service_name"

    OPEN_ACTOR_BASE_URL = "open_actor_base_url"
    OPEN_ACTOR_USERNAME = "open_actor_username"
    OPEN_ACTOR_PASSWORD = "open_actor_password"
    OPEN_ACTOR_HEADERS = "open_actor_headers"
    OPEN_CHART_BASE_URL = "open_chart_base_url"
    OPEN_CHART_USERNAME = "open_chart_username"
    OPEN_CHART_PASSWORD = "open_chart_password"
    OPEN_CHART_HEADERS = "open_chart_headers"
    OPEN_CHC_BASE_URL = "open_chc_base_url"
    OPEN_CHC_USERNAME = "open_chc_username"
    OPEN_CHC_PASSWORD = "open_chc_password"
    OPEN_CHC_HEADERS = "open_chc_headers"
    OPEN_CODING_BASE_URL = "open_coding_base_url"
    OPEN_CODING_USERNAME = "open_coding_username"
    OPEN_CODING_PASSWORD = "open_coding_password"
    OPEN_CODING_HEADERS = "open_coding_headers"
    OPEN_DOCUMENT_BASE_URL = "open_document_base_url"
    OPEN_DOCUMENT_USERNAME = "open_document_username"
    OPEN_DOCUMENT_PASSWORD = "open_document_password"
    OPEN_DOCUMENT_HEADERS = "open_document_headers"
    OPEN_ERX_BASE_URL = "open_erx_base_url"
    OPEN_ERX_USERNAME = "open_erx_username"
    OPEN_ERX_PASSWORD = "open_erx_password"
    OPEN_ERX_HEADERS = "open_erx_headers"
    OPEN_LAB_BASE_URL = "open_lab_base_url"
    OPEN_LAB_USERNAME = "open_lab_username"
    OPEN_LAB_PASSWORD = "open_lab_password"
    OPEN_LAB_HEADERS = "open_lab_headers"
    OPEN_JOB_BASE_URL = "open_job_base_url"
    OPEN_JOB_USERNAME = "open_job_username"
    OPEN_JOB_PASSWORD = "open_job_password"
    OPEN_JOB_HEADERS = "open_job_headers"

    AUTH_TYPE = "auth_type"
    BEARER_TOKEN = "bearer_token"
    API_KEY_NAME = "api_key_name"
    API_KEY_VALUE = "api_key_value"
    API_KEY_LOCATION = "api_key_location"
    ACCESS_TOKEN_URL = "access_token_url"
    CLIENT_ID = "client_id"
    CLIENT_SECRET = "client_secret"
    SCOPE = "scope"

    RETRY = "retry"
    RETRY_MAX_ATTEMPTS = "retry_max_attempts"
    LOG_RESPONSE = "log_response"
    OVERRIDE_REPORTS = "override_reports"
    RELAXED_TLS = "relaxed_tls"
    REQUEST_TIMEOUT_SECONDS = "request_timeout_seconds"

    SEND_EMAIL = "send_email"
    EMAIL_HOST = "email_host"
    EMAIL_PORT = "email_port"
    EMAIL_USERNAME = "email_username"
    EMAIL_PASSWORD = "email_password"
    EMAIL_USE_SSL = "email_use_ssl"
    EMAIL_FROM = "email_from"
    EMAIL_TO_RECIPIENTS = "email_to_recipients"
    EMAIL_CC_RECIPIENTS = "email_cc_recipients"
    EMAIL_SUBJECT = "email_subject"

    DB_URL = "db_url"
    DB_USERNAME = "db_username"
    DB_PASSWORD = "db_password"

    @classmethod
    def parse(cls, name: str) -> ConfigKey:
        """Resolve a key name case-insensitively; unknown names fail fast."""
        normalized = name.strip().lower()
        try:
            return cls(normalized)
        except ValueError as exc:
            raise HarnessError(
                ErrorKind.MISSING_CONFIG, f"Unknown configuration key: {name}"
            ) from exc


REQUIRED_KEYS: tuple[ConfigKey, ...] = (
    ConfigKey.ENV,
    ConfigKey.RUN_MODE,
    ConfigKey.RETRY,
    ConfigKey.LOG_RESPONSE,
    ConfigKey.OVERRIDE_REPORTS,
    ConfigKey.AUTH_TYPE,
    ConfigKey.ACCESS_TOKEN_URL,
    ConfigKey.CLIENT_ID,
    ConfigKey.CLIENT_SECRET,
    ConfigKey.SCOPE,
)

SECRET_KEYS = frozenset(
    {
        ConfigKey.CLIENT_SECRET,
        ConfigKey.BEARER_TOKEN,
        ConfigKey.API_KEY_VALUE,
        ConfigKey.EMAIL_PASSWORD,
        ConfigKey.DB_PASSWORD,
    }
    | {key for key in ConfigKey if key.value.endswith("_password")}
)
