# === NAVMAP v1 ===
# {
#   "module": "RestKit.body",
#   "purpose": "Body sentinel, body draining/duplication, and a file-like reader over byte chunks.",
#   "sections": [
#     {"id": "split-body", "name": "split_body", "anchor": "function-split-body", "kind": "function"},
#     {"id": "bodyreader", "name": "BodyReader", "anchor": "class-bodyreader", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Response-body lifecycle helpers.

``NO_BODY`` is the shared empty-stream sentinel.  It is compared by identity,
so code that receives it must pass the very same object along instead of
wrapping it in a fresh empty buffer.

:func:`split_body` drains a single-consumption stream into memory and hands
back two independent streams over the captured bytes; the dispatcher uses it
to decode a response while keeping a readable copy for the caller.
"""

from __future__ import annotations

import io
import logging
from typing import Iterable, Iterator, Optional, Tuple

import httpx

from .cancellation import CancellationToken
from .errors import BodyDrainError, RequestCancelledError, TransportFailure

logger = logging.getLogger(__name__)

NO_BODY = httpx.ByteStream(b"")


def split_body(stream: httpx.SyncByteStream) -> Tuple[httpx.SyncByteStream, httpx.SyncByteStream]:
    """Read ``stream`` fully and return two equivalent streams yielding the same bytes.

    The original stream is closed once drained.  ``NO_BODY`` is returned
    unchanged on both sides without copying.

    Raises:
        BodyDrainError: If reading or closing the original fails.  The error
            carries the original stream, which has not been closed.
    """
    if stream is NO_BODY:
        return NO_BODY, NO_BODY

    buffer = bytearray()
    try:
        for chunk in stream:
            buffer.extend(chunk)
    except Exception as exc:
        raise BodyDrainError(f"read body: {exc}", stream=stream) from exc

    try:
        stream.close()
    except Exception as exc:
        raise BodyDrainError(f"close body: {exc}", stream=stream) from exc

    captured = bytes(buffer)
    logger.debug("Body drained", extra={"bytes": len(captured)})
    return httpx.ByteStream(captured), httpx.ByteStream(captured)


class BodyReader(io.RawIOBase):
    """Read-only binary file object over an iterator of byte chunks.

    Codecs expect a file-like ``reader``; the dispatcher wraps
    ``response.iter_bytes()`` in this class.  When a token is given it is
    checked before each chunk is pulled from the network.
    """

    def __init__(
        self,
        chunks: Iterable[bytes],
        token: Optional[CancellationToken] = None,
    ) -> None:
        super().__init__()
        self._chunks: Iterator[bytes] = iter(chunks)
        self._pending = b""
        self._token = token

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:  # type: ignore[override]
        while not self._pending:
            if self._token is not None and self._token.is_cancelled():
                raise RequestCancelledError("request cancelled while reading body")
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0
            except (httpx.HTTPError, httpx.StreamError) as exc:
                raise TransportFailure(f"read body: {exc}") from exc
        size = min(len(b), len(self._pending))
        b[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size


__all__ = ["NO_BODY", "BodyReader", "split_body"]
