# === NAVMAP v1 ===
# {
#   "module": "RestKit.ratelimit",
#   "purpose": "Rate-limiting subsystem exports.",
#   "sections": [
#     {"id": "exports", "name": "Public API", "anchor": "exports", "kind": "module"}
#   ]
# }
# === /NAVMAP ===

"""Rate-limiting subsystem: admission control backed by pyrate-limiter.

Modules:
- config: RateSpec parsing and Limiter construction
- gate: RateGate with cancellation-aware blocking acquire

Example:
    >>> from RestKit.ratelimit import RateGate, create_limiter
    >>> gate = RateGate(create_limiter("5/second"))
    >>> gate.acquire(token)
"""

from RestKit.ratelimit.config import (
    RateSpec,
    create_limiter,
    normalize_rate_list,
    parse_rate_string,
)
from RestKit.ratelimit.gate import RateGate, SlotLimiter

__all__ = [
    "RateGate",
    "RateSpec",
    "SlotLimiter",
    "create_limiter",
    "normalize_rate_list",
    "parse_rate_string",
]
