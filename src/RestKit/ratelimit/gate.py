# === NAVMAP v1 ===
# {
#   "module": "RestKit.ratelimit.gate",
#   "purpose": "Admission control that blocks until a limiter slot is free or the call is cancelled.",
#   "sections": [
#     {"id": "slotlimiter", "name": "SlotLimiter", "anchor": "class-slotlimiter", "kind": "class"},
#     {"id": "rategate", "name": "RateGate", "anchor": "class-rategate", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""RateGate: admission control in front of the transport.

Wraps an optional limiter (normally a non-raising
:class:`pyrate_limiter.Limiter` from :func:`~RestKit.ratelimit.config.create_limiter`)
and polls it until a slot is granted.  Between polls the gate sleeps on the
caller's :class:`~RestKit.cancellation.CancellationToken`, so cancelling the
token unblocks a waiting call promptly.

Design:
- **No limiter**: ``acquire`` is a no-op.
- **Denial**: cancellation, deadline expiry, or an exception raised by the
  limiter all surface as :class:`~RestKit.errors.ThrottledError`.
- **Backoff**: the poll interval doubles up to ``max_poll_interval``.
"""

import logging
import time
from typing import Any, Optional, Protocol

from RestKit.cancellation import CancellationToken
from RestKit.errors import ThrottledError

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.01
DEFAULT_MAX_POLL_INTERVAL = 0.25


class SlotLimiter(Protocol):
    """Anything exposing pyrate-limiter's ``try_acquire`` signature."""

    def try_acquire(self, name: str, weight: int = 1) -> Any: ...


class RateGate:
    """Blocks a call until its limiter grants a slot.

    Attributes:
        name: Bucket item name passed to ``try_acquire``
    """

    def __init__(
        self,
        limiter: Optional[SlotLimiter] = None,
        *,
        name: str = "restkit",
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_poll_interval: float = DEFAULT_MAX_POLL_INTERVAL,
    ) -> None:
        if poll_interval <= 0 or max_poll_interval < poll_interval:
            raise ValueError(
                f"Invalid poll intervals: poll_interval={poll_interval}, "
                f"max_poll_interval={max_poll_interval}"
            )
        self._limiter = limiter
        self.name = name
        self._poll_interval = poll_interval
        self._max_poll_interval = max_poll_interval

    @property
    def limiter(self) -> Optional[SlotLimiter]:
        return self._limiter

    def acquire(self, token: Optional[CancellationToken] = None, weight: int = 1) -> None:
        """Wait for a slot.

        Args:
            token: Cancellation token for the current call; ``None`` waits
                without a bound
            weight: Number of slots to acquire

        Raises:
            ThrottledError: If the token fires or the limiter fails
            ValueError: If weight is not positive
        """
        if self._limiter is None:
            return
        if weight <= 0:
            raise ValueError(f"Weight must be positive, got: {weight}")

        started = time.monotonic()
        delay = self._poll_interval
        while True:
            if token is not None and token.is_cancelled():
                self._denied("cancelled", started)

            try:
                acquired = bool(self._limiter.try_acquire(self.name, weight=weight))
            except Exception as exc:
                logger.error(
                    "Rate limiter failed",
                    extra={"bucket": self.name, "weight": weight, "error": str(exc)},
                )
                raise ThrottledError() from exc

            if acquired:
                logger.debug(
                    "Rate limit acquired",
                    extra={
                        "bucket": self.name,
                        "weight": weight,
                        "elapsed_ms": int((time.monotonic() - started) * 1000),
                    },
                )
                return

            if token is None:
                time.sleep(delay)
            elif token.wait(delay):
                self._denied("cancelled", started)
            delay = min(delay * 2, self._max_poll_interval)

    def _denied(self, reason: str, started: float) -> None:
        logger.warning(
            "Rate limit denied",
            extra={
                "bucket": self.name,
                "reason": reason,
                "elapsed_ms": int((time.monotonic() - started) * 1000),
            },
        )
        raise ThrottledError()


__all__ = ["RateGate", "SlotLimiter"]
