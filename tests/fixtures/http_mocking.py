# === NAVMAP v1 ===
# {
#   "module": "tests.fixtures.http_mocking",
#   "purpose": "HTTP mocking fixtures for hermetic client-core testing",
#   "sections": [
#     {"id": "mock-response-builder", "name": "MockResponseBuilder", "anchor": "class-mock-response-builder", "kind": "class"},
#     {"id": "echo-server", "name": "EchoServer", "anchor": "class-echo-server", "kind": "class"},
#     {"id": "echo-server-fixture", "name": "echo_server", "anchor": "fixture-echo-server", "kind": "fixture"},
#     {"id": "routed-server-fixture", "name": "routed_server", "anchor": "fixture-routed-server", "kind": "fixture"}
#   ]
# }
# === /NAVMAP ===

"""
HTTP mocking fixtures for hermetic client-core testing.

Provides HTTPX MockTransport servers and mock response builders to test the
client without real network access. Responses are built over streams (not
``content=``) so bodies stay unread until the client consumes them, just like
a real network response.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, Generator, Iterator, List, Optional, Tuple

import httpx
import pytest

BASE_URL = "http://restkit.test"

ECHO_CONTENT_TYPES = ("application/json", "application/yaml", "text/plain")


class FailingStream(httpx.SyncByteStream):
    """Body stream that yields ``chunks`` and then fails with a read error."""

    def __init__(self, chunks: List[bytes] = None, *, fail_on_close: bool = False) -> None:
        self.chunks = chunks or [b"partial"]
        self.fail_on_close = fail_on_close
        self.closed = False

    def __iter__(self) -> Iterator[bytes]:
        yield from self.chunks
        if not self.fail_on_close:
            raise httpx.ReadError("connection reset by peer")

    def close(self) -> None:
        if self.fail_on_close:
            raise OSError("close failed")
        self.closed = True


class MockResponseBuilder:
    """Builder for constructing mock HTTP responses with fluent API."""

    def __init__(self, status_code: int = 200, content: bytes = b""):
        """Initialize response builder with defaults."""
        self.status_code = status_code
        self.content = content
        self.headers: dict[str, str] = {}

    def with_status(self, code: int) -> MockResponseBuilder:
        """Set response status code."""
        self.status_code = code
        return self

    def with_content(self, content: bytes | str) -> MockResponseBuilder:
        """Set response content."""
        if isinstance(content, str):
            content = content.encode("utf-8")
        self.content = content
        return self

    def with_json(self, data: Any) -> MockResponseBuilder:
        """Set response content as JSON."""
        self.content = json.dumps(data).encode("utf-8")
        self.headers["content-type"] = "application/json"
        return self

    def with_header(self, name: str, value: str) -> MockResponseBuilder:
        """Add response header."""
        self.headers[name] = value
        return self

    def build(self) -> httpx.Response:
        """Build the final (unread) response object."""
        return httpx.Response(
            status_code=self.status_code,
            headers=self.headers,
            stream=httpx.ByteStream(self.content),
        )


class EchoServer:
    """In-process stand-in for a small echo service.

    Requests to ``/node`` are answered with their own body and a
    Content-Type mirroring the request's (``unknown/unknown`` for types it
    does not know).  Any other path gets ``404`` with body ``invalid``.
    Every request is recorded, body included.
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.bodies: List[bytes] = []
        self.transport = httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        body = request.read()
        self.requests.append(request)
        self.bodies.append(body)
        if request.url.path != "/node":
            return httpx.Response(
                404,
                headers={"content-type": "text/plain; charset=utf-8"},
                stream=httpx.ByteStream(b"invalid\n"),
            )
        content_type = request.headers.get("content-type", "")
        if content_type not in ECHO_CONTENT_TYPES:
            content_type = "unknown/unknown"
        return httpx.Response(
            200,
            headers={"content-type": content_type},
            stream=httpx.ByteStream(body),
        )

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def http_client(self) -> httpx.Client:
        return httpx.Client(transport=self.transport)


class RoutedServer:
    """MockTransport answering registered ``(method, path)`` routes."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: List[httpx.Request] = []
        self.transport = httpx.MockTransport(self.handle)

    def register(
        self,
        method: str,
        path: str,
        status_code: int = 200,
        content: bytes | str | Any = b"",
        headers: Optional[Dict[str, str]] = None,
        stream: Optional[httpx.SyncByteStream] = None,
    ) -> None:
        """Register a response for ``method`` + ``path``."""
        response_headers = dict(headers or {})
        if isinstance(content, (dict, list)):
            content = json.dumps(content).encode("utf-8")
            response_headers.setdefault("content-type", "application/json")
        elif isinstance(content, str):
            content = content.encode("utf-8")

        def respond(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                status_code,
                headers=response_headers,
                stream=stream if stream is not None else httpx.ByteStream(content),
            )

        self.routes[(method, path)] = respond

    def register_handler(
        self, method: str, path: str, handler: Callable[[httpx.Request], httpx.Response]
    ) -> None:
        self.routes[(method, path)] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(
                404,
                headers={"content-type": "application/json"},
                stream=httpx.ByteStream(b'{"error": "Not mocked"}'),
            )
        return handler(request)

    def http_client(self) -> httpx.Client:
        return httpx.Client(transport=self.transport)


@pytest.fixture
def http_mock() -> Generator[Callable[..., MockResponseBuilder], None, None]:
    """
    Provide a mock HTTP response builder factory.

    Example:
        def test_callback(http_mock):
            response = http_mock(404).with_content("missing").build()
    """

    def _mock_response(status_code: int = 200, content: bytes | str = b"") -> MockResponseBuilder:
        """Create a mock response builder."""
        if isinstance(content, str):
            content = content.encode("utf-8")
        return MockResponseBuilder(status_code=status_code, content=content)

    yield _mock_response


@pytest.fixture
def echo_server() -> Generator[EchoServer, None, None]:
    """Provide an :class:`EchoServer` reachable at :data:`BASE_URL`."""
    yield EchoServer()


@pytest.fixture
def routed_server() -> Generator[RoutedServer, None, None]:
    """Provide an empty :class:`RoutedServer` reachable at :data:`BASE_URL`."""
    yield RoutedServer()
