# === NAVMAP v1 ===
# {
#   "module": "tests.conftest",
#   "purpose": "Shared pytest fixtures for suite",
#   "sections": [
#     {"id": "reset-settings", "name": "_reset_settings", "anchor": "fixture-reset-settings", "kind": "fixture"},
#     {"id": "make-client", "name": "make_client", "anchor": "fixture-make-client", "kind": "fixture"}
#   ]
# }
# === /NAVMAP ===

"""
Pytest Configuration

Shared fixtures for the client-core suite: hermetic HTTP servers from
``tests.fixtures.http_mocking``, settings isolation, and a client factory
wired to a mock transport.
"""

from __future__ import annotations

import os
from typing import Callable, Generator, List

import httpx
import pytest

from RestKit.network.client import Client, Option, with_http_client
from RestKit.settings import reset_settings
from tests.fixtures.http_mocking import (  # noqa: F401
    BASE_URL,
    echo_server,
    http_mock,
    routed_server,
)


@pytest.fixture(autouse=True)
def _reset_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Drop cached settings and ``RESTKIT_*`` variables around every test."""
    for name in list(os.environ):
        if name.startswith("RESTKIT_"):
            monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def make_client() -> Generator[Callable[..., Client], None, None]:
    """
    Factory building a :class:`Client` on top of a mock transport.

    Example:
        def test_get(make_client, echo_server):
            client = make_client(echo_server.transport, with_content_type("text/plain"))
    """
    transports: List[httpx.Client] = []

    def _make(transport: httpx.BaseTransport, *options: Option, base_url: str = BASE_URL) -> Client:
        http_client = httpx.Client(transport=transport)
        transports.append(http_client)
        return Client(base_url, with_http_client(http_client), *options)

    yield _make

    for http_client in transports:
        http_client.close()
