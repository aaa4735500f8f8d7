# === NAVMAP v1 ===
# {
#   "module": "RestKit.errors",
#   "purpose": "Exception hierarchy shared by request building, dispatch, and decoding.",
#   "sections": [
#     {"id": "restkiterror", "name": "RestKitError", "anchor": "class-restkiterror", "kind": "class"},
#     {"id": "misconfiguredcollaboratorerror", "name": "MisconfiguredCollaboratorError", "anchor": "class-misconfiguredcollaboratorerror", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Exception hierarchy shared across request building, dispatch, and decoding.

The client core spans configuration, codec lookup, admission control, the
network transport, and response decoding.  This module groups those failure
modes into a tidy hierarchy so callers can react to high-level categories
(for example throttling vs. a rejected response) while still reaching the
partial :class:`httpx.Response` when one exists.

:class:`MisconfiguredCollaboratorError` is intentionally *not* part of the
:class:`RestKitError` tree.  It signals that a required collaborator
(marshaler, unmarshaler, or one of the callbacks) was cleared after
construction, which is a programming error rather than a runtime condition.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:  # pragma: no cover - typing only
    import httpx

__all__ = [
    "RestKitError",
    "InvalidConfigurationError",
    "QueryEncodingError",
    "UnknownMediaTypeError",
    "PayloadTypeMismatchError",
    "ThrottledError",
    "TransportFailure",
    "RequestCancelledError",
    "ResponseRejectedError",
    "DecodeFailure",
    "BodyDrainError",
    "MisconfiguredCollaboratorError",
]


class RestKitError(RuntimeError):
    """Base exception for client failures that are reported to the caller."""

    def __init__(self, message: str, *, response: Optional["httpx.Response"] = None) -> None:
        super().__init__(message)
        self.response = response


class InvalidConfigurationError(RestKitError):
    """Raised when a base address, credential, or content type is invalid."""


class QueryEncodingError(InvalidConfigurationError):
    """Raised when query options cannot be merged into a URL.

    ``url`` holds the original, unmodified URL string.
    """

    def __init__(self, message: str, *, url: str) -> None:
        super().__init__(message)
        self.url = url


class UnknownMediaTypeError(RestKitError):
    """Raised when no codec is registered for a content-type identifier."""

    def __init__(self, media_type: str) -> None:
        super().__init__(f"unknown media type: {media_type}")
        self.media_type = media_type


class PayloadTypeMismatchError(RestKitError):
    """Raised when a payload or decode target does not fit the selected codec."""


class ThrottledError(RestKitError):
    """Raised when the rate gate denies admission or the caller cancels while waiting."""

    def __init__(self, message: str = "too many requests") -> None:
        super().__init__(message)


class TransportFailure(RestKitError):
    """Raised when the HTTP transport fails (connection, timeout, protocol)."""


class RequestCancelledError(TransportFailure):
    """Raised when the caller's cancellation token fires around the transport call."""


class ResponseRejectedError(RestKitError):
    """Raised by a response callback that classifies a response as an error."""

    def __init__(
        self,
        message: str,
        *,
        response: Optional["httpx.Response"] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message, response=response)
        if status_code is None and response is not None:
            status_code = response.status_code
        self.status_code = status_code


class DecodeFailure(RestKitError):
    """Raised when a response body cannot be decoded into the requested target."""


class BodyDrainError(RestKitError):
    """Raised when a body stream cannot be drained into memory.

    ``stream`` is the original stream, left unclosed; the caller keeps
    responsibility for closing it.
    """

    def __init__(self, message: str, *, stream: Any) -> None:
        super().__init__(message)
        self.stream = stream


class MisconfiguredCollaboratorError(AssertionError):
    """Raised when a required collaborator is missing at call time."""

    def __init__(self, collaborator: str) -> None:
        super().__init__(f"{collaborator} is None")
        self.collaborator = collaborator
