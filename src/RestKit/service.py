# === NAVMAP v1 ===
# {
#   "module": "RestKit.service",
#   "purpose": "Endpoint wrapper base classes sharing one client.",
#   "sections": [
#     {"id": "service", "name": "Service", "anchor": "class-service", "kind": "class"},
#     {"id": "serviceclient", "name": "ServiceClient", "anchor": "class-serviceclient", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Base classes for endpoint wrappers built on one shared :class:`Client`.

A service groups the endpoint methods of one resource (``posts``, ``users``
...) and issues its calls through the client it was given.  A
:class:`ServiceClient` owns the client and instantiates every service listed
in :attr:`ServiceClient.services` as an attribute:

    >>> class Posts(Service):
    ...     def get(self, post_id: int) -> Post:
    ...         post = Target(Post)
    ...         self.call("GET", f"posts/{post_id}", target=post)
    ...         return post.value
    >>> class Blog(ServiceClient):
    ...     services = {"posts": Posts}
    >>> blog = Blog("https://blog.example")
    >>> blog.posts.get(1)
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Dict, Optional, Type

import httpx

from .cancellation import CancellationToken
from .network.client import Client, Option

logger = logging.getLogger(__name__)

__all__ = ["Service", "ServiceClient"]


class Service:
    """Endpoint wrapper holding a reference to a shared :class:`Client`."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def call(
        self,
        method: str,
        path: str,
        payload: Any = None,
        target: Any = None,
        token: Optional[CancellationToken] = None,
    ) -> httpx.Response:
        """Build a request for ``path`` and dispatch it."""
        request = self.client.build_request(method, path, payload)
        return self.client.dispatch(token, request, target)


class ServiceClient:
    """Aggregate owning one :class:`Client` and its services."""

    services: ClassVar[Dict[str, Type[Service]]] = {}

    def __init__(self, base_url: str, *options: Option, client: Optional[Client] = None) -> None:
        self.client = client if client is not None else Client(base_url, *options)
        for name, service_cls in self.services.items():
            setattr(self, name, service_cls(self.client))
        logger.debug(
            "Service client initialized",
            extra={"client": type(self).__name__, "services": sorted(self.services)},
        )

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "ServiceClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
