"""Network subsystem: client core, transport defaults, and instrumentation.

This package provides the synchronous HTTP client core built on:
- HTTPX: HTTP/1.1 transport with connection pooling
- pyrate-limiter: Multi-window admission control (via ``RestKit.ratelimit``)

Modules:
- client: ``Client``, its options, request building, and dispatch
- policy: HTTP policy constants (timeouts, pooling, User-Agent)
- instrumentation: Logging callbacks and ``curl`` dumping

Example:
    >>> from RestKit.network import Client, with_content_type, with_rate_limiter
    >>> client = Client(
    ...     "https://jsonplaceholder.typicode.com",
    ...     with_content_type("application/json"),
    ...     with_rate_limiter("5/second"),
    ... )
    >>> response = client.do("GET", "posts/1", target=Target(Post))
"""

from RestKit.network.client import (
    Client,
    Option,
    RequestCallbackFunc,
    ResponseCallbackFunc,
    create_http_client,
    request_callback,
    response_callback,
    status_line,
    with_content_type,
    with_headers,
    with_http_client,
    with_http_settings,
    with_keep_response_body,
    with_password,
    with_rate_limiter,
    with_username,
)
from RestKit.network.instrumentation import create_logging_callbacks, curl_command, redact_url
from RestKit.network.policy import (
    HTTP_CONNECT_TIMEOUT,
    HTTP_POOL_TIMEOUT,
    HTTP_READ_TIMEOUT,
    HTTP_WRITE_TIMEOUT,
    KEEPALIVE_EXPIRY,
    MAX_CONNECTIONS,
    MAX_KEEPALIVE_CONNECTIONS,
    USER_AGENT,
)

__all__ = [
    # Client
    "Client",
    "Option",
    "RequestCallbackFunc",
    "ResponseCallbackFunc",
    "create_http_client",
    "request_callback",
    "response_callback",
    "status_line",
    # Options
    "with_content_type",
    "with_headers",
    "with_http_client",
    "with_http_settings",
    "with_keep_response_body",
    "with_password",
    "with_rate_limiter",
    "with_username",
    # Instrumentation
    "create_logging_callbacks",
    "curl_command",
    "redact_url",
    # Timeouts and pooling
    "HTTP_CONNECT_TIMEOUT",
    "HTTP_READ_TIMEOUT",
    "HTTP_WRITE_TIMEOUT",
    "HTTP_POOL_TIMEOUT",
    "MAX_CONNECTIONS",
    "MAX_KEEPALIVE_CONNECTIONS",
    "KEEPALIVE_EXPIRY",
    "USER_AGENT",
]
