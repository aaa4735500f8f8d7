# === NAVMAP v1 ===
# {
#   "module": "RestKit.network.client",
#   "purpose": "Client core: options, request building, and rate-limited dispatch with body lifecycle.",
#   "sections": [
#     {"id": "create-http-client", "name": "create_http_client", "anchor": "function-create-http-client", "kind": "function"},
#     {"id": "options", "name": "with_* options", "anchor": "options", "kind": "function"},
#     {"id": "client", "name": "Client", "anchor": "class-client", "kind": "class"},
#     {"id": "request-callback", "name": "request_callback", "anchor": "function-request-callback", "kind": "function"},
#     {"id": "response-callback", "name": "response_callback", "anchor": "function-response-callback", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Client core for RESTish HTTP services.

Application-specific service wrappers hold one :class:`Client` and only
implement endpoint methods on top of :meth:`Client.build_request` and
:meth:`Client.dispatch`.

Key design:
- **Pluggable collaborators**: ``marshaler``, ``unmarshaler``,
  ``request_callback`` and ``response_callback`` are plain attributes that the
  embedding application may replace.  Finding one of them ``None`` at call
  time raises :class:`~RestKit.errors.MisconfiguredCollaboratorError`.
- **Streaming responses**: requests are sent with ``stream=True``; the body is
  closed after decoding unless the client keeps response bodies, in which case
  a buffered copy is re-attached for the caller.
- **Admission control**: an optional :class:`~RestKit.ratelimit.RateGate`
  runs before the transport; a throttled call never reaches the network.
- **Cancellation**: one :class:`~RestKit.cancellation.CancellationToken` per
  call bounds the rate-gate wait and the transport call.

Example:
    >>> client = Client("https://jsonplaceholder.typicode.com", with_content_type("application/json"))
    >>> request = client.build_request("GET", "posts/1")
    >>> post = Target(Post)
    >>> response = client.dispatch(CancellationToken(timeout=10), request, post)
"""

import base64
import io
import logging
import time
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, Union

import httpx

from RestKit.body import NO_BODY, BodyReader, split_body
from RestKit.cancellation import CancellationToken
from RestKit.codecs import CONTENT_TYPE_JSON, MarshalerFunc, UnmarshalerFunc, marshal, unmarshal
from RestKit.errors import (
    BodyDrainError,
    InvalidConfigurationError,
    MisconfiguredCollaboratorError,
    RequestCancelledError,
    ResponseRejectedError,
    RestKitError,
    TransportFailure,
)
from RestKit.network import policy
from RestKit.network.instrumentation import redact_url
from RestKit.query import validate_url
from RestKit.ratelimit.config import create_limiter
from RestKit.ratelimit.gate import RateGate, SlotLimiter

if TYPE_CHECKING:  # pragma: no cover - import cycle guard for type checkers only
    from RestKit.settings import ClientSettings, HttpSettings

logger = logging.getLogger(__name__)

RequestCallbackFunc = Callable[[httpx.Request], httpx.Request]
ResponseCallbackFunc = Callable[[httpx.Response], httpx.Response]
Option = Callable[["Client"], None]


# ============================================================================
# Transport
# ============================================================================


def create_http_client(http_settings: Optional["HttpSettings"] = None) -> httpx.Client:
    """Create the default ``httpx.Client`` transport.

    Args:
        http_settings: Optional transport settings; policy defaults otherwise.
    """
    if http_settings is None:
        timeout = httpx.Timeout(
            connect=policy.HTTP_CONNECT_TIMEOUT,
            read=policy.HTTP_READ_TIMEOUT,
            write=policy.HTTP_WRITE_TIMEOUT,
            pool=policy.HTTP_POOL_TIMEOUT,
        )
        limits = httpx.Limits(
            max_connections=policy.MAX_CONNECTIONS,
            max_keepalive_connections=policy.MAX_KEEPALIVE_CONNECTIONS,
            keepalive_expiry=policy.KEEPALIVE_EXPIRY,
        )
        trust_env = True
    else:
        timeout = httpx.Timeout(
            connect=http_settings.timeout_connect,
            read=http_settings.timeout_read,
            write=http_settings.timeout_write,
            pool=http_settings.timeout_pool,
        )
        limits = httpx.Limits(
            max_connections=http_settings.pool_max_connections,
            max_keepalive_connections=http_settings.pool_keepalive_max,
            keepalive_expiry=http_settings.keepalive_expiry,
        )
        trust_env = http_settings.trust_env

    return httpx.Client(
        timeout=timeout,
        limits=limits,
        trust_env=trust_env,
        follow_redirects=True,
    )


# ============================================================================
# Default collaborators
# ============================================================================


def request_callback(request: httpx.Request) -> httpx.Request:
    """Default request callback: returns the request unchanged."""
    return request


def status_line(response: httpx.Response) -> str:
    """Return ``"<code> <reason>"`` for ``response``, e.g. ``"404 Not Found"``."""
    return f"{response.status_code} {response.reason_phrase}".strip()


def response_callback(response: httpx.Response) -> httpx.Response:
    """Default response callback: reject any status outside 200-299.

    The error text is the status line only; the body is left unread.
    """
    if response.status_code in policy.SUCCESS_STATUS_RANGE:
        return response
    raise ResponseRejectedError(status_line(response), response=response)


def basic_auth_header(username: str, password: str) -> str:
    credentials = f"{username}:{password}".encode("utf-8")
    return "Basic " + base64.b64encode(credentials).decode("ascii")


# ============================================================================
# Options
# ============================================================================


def with_username(username: str) -> Option:
    """Set the basic-auth username."""

    def apply(client: "Client") -> None:
        if not username:
            raise InvalidConfigurationError("username cannot be empty")
        client._username = username

    return apply


def with_password(password: str) -> Option:
    """Set the basic-auth password."""

    def apply(client: "Client") -> None:
        if not password:
            raise InvalidConfigurationError("password cannot be empty")
        client._password = password

    return apply


def with_headers(headers: Union[Mapping[str, str], httpx.Headers]) -> Option:
    """Replace the default headers of every request.

    ``Content-Type`` and ``Accept`` are still set from the content type, and a
    configured username/password overrides any ``Authorization`` header.
    """

    def apply(client: "Client") -> None:
        client._headers = httpx.Headers(headers)

    return apply


def with_http_client(http_client: httpx.Client) -> Option:
    """Use ``http_client`` as the transport instead of the default one.

    The caller keeps ownership; :meth:`Client.close` does not close it.
    """

    def apply(client: "Client") -> None:
        if not isinstance(http_client, httpx.Client):
            raise InvalidConfigurationError(
                f"http client must be an httpx.Client, got {type(http_client).__name__}"
            )
        client._replace_http_client(http_client, owned=False)

    return apply


def with_http_settings(http_settings: "HttpSettings") -> Option:
    """Build the default transport from ``http_settings`` and use its User-Agent."""

    def apply(client: "Client") -> None:
        client._replace_http_client(create_http_client(http_settings), owned=True)
        client._user_agent = http_settings.user_agent

    return apply


def with_rate_limiter(limiter: Union[None, str, RateGate, SlotLimiter]) -> Option:
    """Gate every dispatch on ``limiter``.

    Accepts a :class:`RateGate`, anything with pyrate-limiter's
    ``try_acquire``, or a rate string such as ``"5/second"``.
    """

    def apply(client: "Client") -> None:
        if isinstance(limiter, RateGate):
            client._rate_gate = limiter
        elif isinstance(limiter, str):
            try:
                client._rate_gate = RateGate(create_limiter(limiter))
            except ValueError as exc:
                raise InvalidConfigurationError(str(exc)) from exc
        else:
            client._rate_gate = RateGate(limiter)

    return apply


def with_content_type(content_type: str) -> Option:
    """Set the content type used for marshaling, unmarshaling, and headers."""

    def apply(client: "Client") -> None:
        if not content_type:
            raise InvalidConfigurationError("content type cannot be empty")
        client.content_type = content_type

    return apply


def with_keep_response_body() -> Option:
    """Leave ``response`` bodies readable after dispatch.

    The caller becomes responsible for closing the response.
    """

    def apply(client: "Client") -> None:
        client._keep_response_body = True

    return apply


# ============================================================================
# Client
# ============================================================================


class Client:
    """Generic HTTP client core.

    Attributes:
        base_url: Address relative request paths are resolved against
        content_type: Content-Type/Accept value; also selects the codec
        marshaler: Encodes request payloads
        unmarshaler: Decodes response bodies
        request_callback: Sees (and may replace) every built request
        response_callback: Sees (and may replace or reject) every response
    """

    def __init__(self, base_url: str, *options: Option) -> None:
        validate_url(base_url)
        try:
            self.base_url = httpx.URL(base_url)
        except httpx.InvalidURL as exc:
            raise InvalidConfigurationError(f"parse {base_url!r}: {exc}") from exc

        self.content_type: str = CONTENT_TYPE_JSON
        self.marshaler: Optional[MarshalerFunc] = marshal
        self.unmarshaler: Optional[UnmarshalerFunc] = unmarshal
        self.request_callback: Optional[RequestCallbackFunc] = request_callback
        self.response_callback: Optional[ResponseCallbackFunc] = response_callback

        self._username: Optional[str] = None
        self._password: Optional[str] = None
        self._headers: Optional[httpx.Headers] = None
        self._user_agent = policy.USER_AGENT
        self._rate_gate = RateGate()
        self._keep_response_body = False
        self._http_client: Optional[httpx.Client] = None
        self._owns_http_client = False

        for option in options:
            option(self)

        if self._http_client is None:
            self._replace_http_client(create_http_client(), owned=True)

        logger.debug(
            "Client initialized",
            extra={
                "base_url": redact_url(str(self.base_url)),
                "content_type": self.content_type,
                "rate_limited": self._rate_gate.limiter is not None,
                "keep_response_body": self._keep_response_body,
            },
        )

    @classmethod
    def from_settings(cls, settings: Optional["ClientSettings"] = None, *options: Option) -> "Client":
        """Build a client from :class:`~RestKit.settings.ClientSettings`.

        Extra ``options`` are applied after the settings-derived ones.
        """
        from RestKit.settings import get_settings

        settings = settings or get_settings()
        if not settings.base_url:
            raise InvalidConfigurationError("base_url is not configured")

        derived = [
            with_content_type(settings.content_type),
            with_http_settings(settings.http),
        ]
        if settings.username:
            derived.append(with_username(settings.username))
        if settings.password is not None:
            derived.append(with_password(settings.password.get_secret_value()))
        if settings.headers:
            derived.append(with_headers(settings.headers))
        if settings.rate_limit:
            derived.append(with_rate_limiter(settings.rate_limit))
        if settings.keep_response_body:
            derived.append(with_keep_response_body())
        return cls(settings.base_url, *derived, *options)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def http_client(self) -> httpx.Client:
        assert self._http_client is not None
        return self._http_client

    @property
    def keep_response_body(self) -> bool:
        return self._keep_response_body

    @property
    def rate_gate(self) -> RateGate:
        return self._rate_gate

    def _replace_http_client(self, http_client: httpx.Client, *, owned: bool) -> None:
        if self._http_client is not None and self._owns_http_client:
            self._http_client.close()
        self._http_client = http_client
        self._owns_http_client = owned

    def close(self) -> None:
        """Close the transport if this client created it."""
        if self._http_client is not None and self._owns_http_client:
            self._http_client.close()
            logger.debug("Client transport closed")

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Request building
    # ------------------------------------------------------------------

    def build_request(self, method: str, path: str, payload: Any = None) -> httpx.Request:
        """Create a request for ``path`` relative to :attr:`base_url`.

        Relative paths should be given without a leading slash; a leading
        slash replaces the base path.  ``payload`` is encoded with the
        client's content type; ``None`` yields an empty body.

        Raises:
            InvalidConfigurationError: If ``path`` cannot be resolved
            UnknownMediaTypeError: If no codec handles the content type
            PayloadTypeMismatchError: If the codec cannot encode ``payload``
        """
        try:
            url = self.base_url.join(path)
        except httpx.InvalidURL as exc:
            raise InvalidConfigurationError(f"parse {path!r}: {exc}") from exc

        if self.marshaler is None:
            raise MisconfiguredCollaboratorError("marshaler")

        buffer = io.BytesIO()
        content_type = self.marshaler(buffer, payload, self.content_type)

        if self._headers is not None:
            headers = self._headers.copy()
        else:
            headers = httpx.Headers({"User-Agent": self._user_agent})
        if self._username and self._password:
            headers["Authorization"] = basic_auth_header(self._username, self._password)
        headers["Content-Type"] = content_type
        headers["Accept"] = content_type

        body = buffer.getvalue()
        request = httpx.Request(method, url, headers=headers, content=body)
        if not body:
            request.stream = NO_BODY

        if self.request_callback is None:
            raise MisconfiguredCollaboratorError("request_callback")
        result = self.request_callback(request)
        if result is None:
            raise MisconfiguredCollaboratorError("request_callback result")
        return result

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(
        self,
        token: Optional[CancellationToken],
        request: httpx.Request,
        target: Any = None,
    ) -> httpx.Response:
        """Send ``request`` and decode the response body into ``target``.

        ``target`` may be a :class:`~RestKit.codecs.Target`, an object with
        ``write(bytes)`` receiving the raw body, or ``None`` to discard it.

        Returns:
            The response.  Its body is closed unless the client keeps
            response bodies.

        Raises:
            ThrottledError: The rate gate denied admission; nothing was sent
            TransportFailure: The transport failed or the call was cancelled
            ResponseRejectedError: The response callback rejected the response
            DecodeFailure: The body could not be decoded into ``target``

            Errors raised after a response arrived carry it as ``.response``.
        """
        self._rate_gate.acquire(token)

        response = self._send(token, request)
        saved: Optional[httpx.SyncByteStream] = None
        try:
            if self._keep_response_body:
                try:
                    saved, response.stream = split_body(response.stream)
                except BodyDrainError as exc:
                    raise TransportFailure(str(exc), response=response) from exc

            if self.response_callback is None:
                raise MisconfiguredCollaboratorError("response_callback")
            try:
                intercepted = self.response_callback(response)
            except RestKitError as exc:
                if exc.response is None:
                    exc.response = response
                raise
            if intercepted is None:
                raise MisconfiguredCollaboratorError("response_callback result")
            if intercepted is not response:
                if saved is not None:
                    response.stream = saved
                    saved = None
                else:
                    self._close_body(response)
            response = intercepted

            if self.unmarshaler is None:
                raise MisconfiguredCollaboratorError("unmarshaler")
            try:
                self.unmarshaler(self._body_reader(response, token, saved is not None), target, self.content_type)
            except RestKitError as exc:
                if exc.response is None:
                    exc.response = response
                raise
            return response
        finally:
            if saved is not None:
                response.stream = saved
            else:
                self._close_body(response)

    def do(
        self,
        method: str,
        path: str,
        payload: Any = None,
        target: Any = None,
        token: Optional[CancellationToken] = None,
    ) -> httpx.Response:
        """Build and dispatch a request in one call."""
        return self.dispatch(token, self.build_request(method, path, payload), target)

    def _send(self, token: Optional[CancellationToken], request: httpx.Request) -> httpx.Response:
        if token is not None and token.is_cancelled():
            raise RequestCancelledError("request cancelled before send")

        request.extensions["timeout"] = self._timeout_for(token, request)
        started = time.perf_counter()
        try:
            response = self.http_client.send(request, stream=True)
        except httpx.HTTPError as exc:
            elapsed_ms = int((time.perf_counter() - started) * 1000)
            logger.error(
                "HTTP request failed",
                extra={
                    "method": request.method,
                    "url": redact_url(str(request.url)),
                    "elapsed_ms": elapsed_ms,
                    "error": str(exc),
                },
            )
            if token is not None and token.is_cancelled():
                raise RequestCancelledError(f"request cancelled: {exc}") from exc
            raise TransportFailure(str(exc) or type(exc).__name__) from exc

        if token is not None and token.is_cancelled():
            self._close_body(response)
            raise RequestCancelledError("request cancelled during send")

        logger.debug(
            "Response received",
            extra={
                "method": request.method,
                "url": redact_url(str(request.url)),
                "status": response.status_code,
                "elapsed_ms": int((time.perf_counter() - started) * 1000),
            },
        )
        return response

    def _timeout_for(self, token: Optional[CancellationToken], request: httpx.Request) -> Dict[str, Optional[float]]:
        timeout = dict(request.extensions.get("timeout") or self.http_client.timeout.as_dict())
        remaining = token.remaining() if token is not None else None
        if remaining is None:
            return timeout
        return {
            phase: remaining if value is None else min(value, remaining)
            for phase, value in timeout.items()
        }

    @staticmethod
    def _body_reader(
        response: httpx.Response,
        token: Optional[CancellationToken],
        kept: bool,
    ) -> BodyReader:
        if kept:
            # Decode through a throwaway response so the caller's response
            # keeps its unread state for the re-attached copy.
            source = httpx.Response(
                status_code=response.status_code,
                headers=response.headers,
                stream=response.stream,
            )
        else:
            source = response
        return BodyReader(source.iter_bytes(), token)

    @staticmethod
    def _close_body(response: httpx.Response) -> None:
        try:
            response.close()
        except Exception as exc:
            logger.debug("Error closing response body", extra={"error": str(exc)})


__all__ = [
    "Client",
    "Option",
    "RequestCallbackFunc",
    "ResponseCallbackFunc",
    "basic_auth_header",
    "create_http_client",
    "request_callback",
    "response_callback",
    "status_line",
    "with_content_type",
    "with_headers",
    "with_http_client",
    "with_http_settings",
    "with_keep_response_body",
    "with_password",
    "with_rate_limiter",
    "with_username",
]
