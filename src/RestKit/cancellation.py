# === NAVMAP v1 ===
# {
#   "module": "RestKit.cancellation",
#   "purpose": "Cooperative cancellation tokens honoured by the rate gate and dispatcher.",
#   "sections": [
#     {"id": "cancellationtoken", "name": "CancellationToken", "anchor": "class-cancellationtoken", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Cooperative cancellation primitives shared by in-flight client calls.

Every :meth:`RestKit.network.client.Client.dispatch` call accepts one
:class:`CancellationToken`.  The token is consulted at the two places a call
can block: while waiting for a rate-limit slot and around the transport call.
An optional deadline turns the token into a per-call time budget, which the
dispatcher also forwards to the transport as its timeout.
"""

from __future__ import annotations

import threading
import time
from typing import Optional


class CancellationToken:
    """Thread-safe cancellation token for cooperative task cancellation.

    Examples:
        >>> token = CancellationToken(timeout=5.0)
        >>> client.dispatch(token, request, target)
        >>> # From another thread
        >>> token.cancel()
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        """Initialize a new token, optionally expiring ``timeout`` seconds from now."""
        self._is_cancelled = threading.Event()
        self._lock = threading.Lock()
        self._deadline: Optional[float] = None
        if timeout is not None:
            if timeout < 0:
                raise ValueError(f"timeout must be non-negative, got: {timeout}")
            self._deadline = time.monotonic() + timeout

    def cancel(self) -> None:
        """Signal that cancellation has been requested."""
        with self._lock:
            self._is_cancelled.set()

    def is_cancelled(self) -> bool:
        """Return ``True`` once cancelled explicitly or past the deadline."""
        if self._is_cancelled.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or ``None`` when the token has none."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``, waking early on cancellation.

        Returns:
            True if the token is cancelled when the wait ends.
        """
        remaining = self.remaining()
        if remaining is not None:
            seconds = min(seconds, remaining)
        self._is_cancelled.wait(max(0.0, seconds))
        return self.is_cancelled()

    def reset(self) -> None:
        """Reset the explicit cancellation flag.

        This should only be used for testing or when reusing tokens
        in controlled scenarios; a deadline is not cleared.
        """
        with self._lock:
            self._is_cancelled.clear()


__all__ = ["CancellationToken"]
