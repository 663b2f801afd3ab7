"""Request dispatch domain exports."""

from .oauth_tokens import BearerTokenStore, OAuthTokenProvider
from .request_dispatcher import (
    AUTH_TYPES,
    INVALID_HEADERS,
    INVALID_PASSWORD,
    INVALID_USERNAME,
    RequestDispatcher,
)
from .request_models import (
    ApiKeyAuth,
    AuthDescriptor,
    BasicAuth,
    BearerAuth,
    NoAuth,
    RequestPlan,
    ResponseRecord,
)
from .service_profiles import Service, ServiceProfile, parse_header_list, resolve_service_profile

__all__ = [
    "Service",
    "ServiceProfile",
    "resolve_service_profile",
    "parse_header_list",
    "AuthDescriptor",
    "BasicAuth",
    "BearerAuth",
    "ApiKeyAuth",
    "NoAuth",
    "RequestPlan",
    "ResponseRecord",
    "BearerTokenStore",
    "OAuthTokenProvider",
    "RequestDispatcher",
    "AUTH_TYPES",
    "INVALID_USERNAME",
    "INVALID_PASSWORD",
    "INVALID_HEADERS",
]
