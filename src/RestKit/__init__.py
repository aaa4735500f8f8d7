# === NAVMAP v1 ===
# {
#   "module": "RestKit",
#   "purpose": "Package initialization for RestKit",
#   "sections": []
# }
# === /NAVMAP ===

"""Public API for the RestKit HTTP client core.

This facade exposes the client, its options, the codec registry, the
cancellation token, and the error hierarchy used by service wrappers built
on top of the core.
"""

from __future__ import annotations

from .body import NO_BODY, BodyReader, split_body
from .cancellation import CancellationToken
from .codecs import (
    CONTENT_TYPE_JSON,
    CONTENT_TYPE_TEXT,
    CONTENT_TYPE_YAML,
    Codec,
    CodecRegistry,
    Target,
    default_registry,
    marshal,
    unmarshal,
)
from .errors import (
    BodyDrainError,
    DecodeFailure,
    InvalidConfigurationError,
    MisconfiguredCollaboratorError,
    PayloadTypeMismatchError,
    QueryEncodingError,
    RequestCancelledError,
    ResponseRejectedError,
    RestKitError,
    ThrottledError,
    TransportFailure,
    UnknownMediaTypeError,
)
from .logging_utils import setup_logging
from .network import (
    Client,
    create_logging_callbacks,
    curl_command,
    with_content_type,
    with_headers,
    with_http_client,
    with_http_settings,
    with_keep_response_body,
    with_password,
    with_rate_limiter,
    with_username,
)
from .query import with_query_parameters
from .ratelimit import RateGate, create_limiter
from .service import Service, ServiceClient
from .settings import ClientSettings, HttpSettings, get_settings, reset_settings

__version__ = "0.1.0"

__all__ = [
    "BodyDrainError",
    "BodyReader",
    "CONTENT_TYPE_JSON",
    "CONTENT_TYPE_TEXT",
    "CONTENT_TYPE_YAML",
    "CancellationToken",
    "Client",
    "ClientSettings",
    "Codec",
    "CodecRegistry",
    "DecodeFailure",
    "HttpSettings",
    "InvalidConfigurationError",
    "MisconfiguredCollaboratorError",
    "NO_BODY",
    "PayloadTypeMismatchError",
    "QueryEncodingError",
    "RateGate",
    "RequestCancelledError",
    "ResponseRejectedError",
    "RestKitError",
    "Service",
    "ServiceClient",
    "Target",
    "ThrottledError",
    "TransportFailure",
    "UnknownMediaTypeError",
    "create_limiter",
    "create_logging_callbacks",
    "curl_command",
    "default_registry",
    "get_settings",
    "marshal",
    "reset_settings",
    "setup_logging",
    "split_body",
    "unmarshal",
    "with_content_type",
    "with_headers",
    "with_http_client",
    "with_http_settings",
    "with_keep_response_body",
    "with_password",
    "with_query_parameters",
    "with_rate_limiter",
    "with_username",
]
