# === NAVMAP v1 ===
# {
#   "module": "RestKit.network.instrumentation",
#   "purpose": "Logging request/response callbacks and request dumping helpers.",
#   "sections": [
#     {
#       "id": "create-logging-callbacks",
#       "name": "create_logging_callbacks",
#       "anchor": "function-create-logging-callbacks",
#       "kind": "function"
#     },
#     {
#       "id": "curl-command",
#       "name": "curl_command",
#       "anchor": "function-curl-command",
#       "kind": "function"
#     },
#     {
#       "id": "redact-url",
#       "name": "redact_url",
#       "anchor": "function-redact-url",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Request/response instrumentation for the client core.

Provides callbacks that plug into ``Client.request_callback`` and
``Client.response_callback`` and log every call (method, redacted URL,
status, elapsed time), plus :func:`curl_command` for dumping a built request.
"""

import logging
import shlex
import time
from typing import Callable, Optional, Tuple
from urllib.parse import urlsplit, urlunsplit

import httpx

_SENSITIVE_HEADERS = {"authorization", "proxy-authorization", "cookie", "x-api-key"}
START_TIME_EXTENSION = "restkit.started"


def create_logging_callbacks(
    logger: Optional[logging.Logger] = None,
    level: int = logging.INFO,
    next_response_callback: Optional[Callable[[httpx.Response], httpx.Response]] = None,
) -> Tuple[Callable[[httpx.Request], httpx.Request], Callable[[httpx.Response], httpx.Response]]:
    """Create request/response callbacks that log each call.

    Args:
        logger: Logger to write to; ``RestKit.network`` by default
        level: Level of the per-response record
        next_response_callback: Callback run after logging; the default
            status check when omitted

    Returns:
        ``(request_callback, response_callback)`` ready to assign to a client

    Usage:
        >>> on_request, on_response = create_logging_callbacks()
        >>> client.request_callback = on_request
        >>> client.response_callback = on_response
    """
    log = logger or logging.getLogger("RestKit.network")
    if next_response_callback is None:
        from RestKit.network.client import response_callback as next_response_callback

    def on_request(request: httpx.Request) -> httpx.Request:
        """Record the start time of ``request``."""
        request.extensions[START_TIME_EXTENSION] = time.perf_counter()
        log.debug(
            "HTTP request built",
            extra={"method": request.method, "url": redact_url(str(request.url))},
        )
        return request

    def on_response(response: httpx.Response) -> httpx.Response:
        """Log ``response`` and hand it to the next callback."""
        start_time = response.request.extensions.get(START_TIME_EXTENSION)
        elapsed_ms = None
        if start_time is not None:
            elapsed_ms = int((time.perf_counter() - start_time) * 1000)

        log.log(
            level,
            "HTTP %s %s -> %s",
            response.request.method,
            redact_url(str(response.request.url)),
            response.status_code,
            extra={
                "method": response.request.method,
                "url": redact_url(str(response.request.url)),
                "host": response.request.url.host or "unknown",
                "status": response.status_code,
                "http_version": response.http_version,
                "elapsed_ms": elapsed_ms,
            },
        )
        return next_response_callback(response)

    return on_request, on_response


def redact_url(url: str) -> str:
    """Redact credentials and the query string from ``url``.

    Keeps only scheme + host + path.
    """
    try:
        parsed = urlsplit(url)
        netloc = parsed.netloc.rsplit("@", 1)[-1]
        return urlunsplit((parsed.scheme, netloc, parsed.path, "", ""))
    except ValueError:
        return "[URL_REDACTION_FAILED]"


def _request_body(request: httpx.Request) -> bytes:
    if isinstance(request.stream, httpx.ByteStream):
        return b"".join(request.stream)
    return b""


def curl_command(request: httpx.Request, *, reveal_secrets: bool = False) -> str:
    """Render ``request`` as an equivalent ``curl`` command line.

    Sensitive header values are masked unless ``reveal_secrets`` is set.
    Streaming bodies are omitted.
    """
    parts = ["curl", "-X", request.method]
    encoding = request.headers.encoding
    for raw_name, raw_value in request.headers.raw:
        name, value = raw_name.decode(encoding), raw_value.decode(encoding)
        if name.lower() == "content-length":
            continue
        if name.lower() in _SENSITIVE_HEADERS and not reveal_secrets:
            value = "***masked***"
        parts.extend(["-H", f"{name}: {value}"])
    body = _request_body(request)
    if body:
        parts.extend(["--data-binary", body.decode("utf-8", errors="replace")])
    parts.append(str(request.url))
    return " ".join(shlex.quote(part) for part in parts)


__all__ = [
    "START_TIME_EXTENSION",
    "create_logging_callbacks",
    "curl_command",
    "redact_url",
]
