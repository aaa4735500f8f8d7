# === NAVMAP v1 ===
# {
#   "module": "RestKit.ratelimit.config",
#   "purpose": "RateSpec parsing and pyrate-limiter Limiter construction.",
#   "sections": [
#     {"id": "ratespec", "name": "RateSpec", "anchor": "class-ratespec", "kind": "class"},
#     {"id": "parse-rate-string", "name": "parse_rate_string", "anchor": "function-parse-rate-string", "kind": "function"},
#     {"id": "normalize-rate-list", "name": "normalize_rate_list", "anchor": "function-normalize-rate-list", "kind": "function"},
#     {"id": "create-limiter", "name": "create_limiter", "anchor": "function-create-limiter", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""RateSpec parsing and limiter construction for the rate gate.

Parses human-readable rate strings (e.g., "5/second") into structured
RateSpec objects compatible with pyrate-limiter, and builds the non-raising
:class:`pyrate_limiter.Limiter` the :class:`~RestKit.ratelimit.gate.RateGate`
polls.  Several windows can be combined ("5/second,300/minute").

Example:
    >>> spec = parse_rate_string("5/second")
    >>> print(spec.limit, spec.interval_ms)
    5 1000
    >>> limiter = create_limiter("5/second,300/minute")
"""

import re
from dataclasses import dataclass
from typing import List, Sequence, Union

from pyrate_limiter import Limiter, Rate

DURATION_MS = {
    "second": 1_000,
    "minute": 60 * 1_000,
    "hour": 60 * 60 * 1_000,
    "day": 24 * 60 * 60 * 1_000,
}

DURATION_ALIASES = {
    "s": "second",
    "sec": "second",
    "m": "minute",
    "min": "minute",
    "h": "hour",
    "hr": "hour",
    "d": "day",
}

RATE_STRING_PATTERN = re.compile(r"^\s*(\d+)\s*/\s*(\w+)\s*$")


@dataclass(frozen=True)
class RateSpec:
    """Normalized rate specification.

    Represents a single rate window (e.g., "5 per second").

    Attributes:
        limit: Number of events allowed
        interval_ms: Duration in milliseconds
    """

    limit: int
    interval_ms: int

    @property
    def rps(self) -> float:
        """Requests per second."""
        return (self.limit * 1000) / self.interval_ms

    def to_rate(self) -> Rate:
        return Rate(self.limit, self.interval_ms)

    def __str__(self) -> str:
        if self.interval_ms == 1_000:
            return f"{self.limit}/second"
        elif self.interval_ms == 60_000:
            return f"{self.limit}/minute"
        elif self.interval_ms == 3_600_000:
            return f"{self.limit}/hour"
        elif self.interval_ms == 86_400_000:
            return f"{self.limit}/day"
        else:
            return f"{self.limit}/{self.interval_ms}ms"


def parse_rate_string(spec: str) -> RateSpec:
    """Parse human-readable rate string into RateSpec.

    Format: "{limit}/{duration}" where duration is second/minute/hour/day
    (or one of the short aliases s, sec, m, min, h, hr, d).

    Examples:
        "5/second"    → RateSpec(limit=5, interval_ms=1000)
        "300/minute"  → RateSpec(limit=300, interval_ms=60000)
        "10/hr"       → RateSpec(limit=10, interval_ms=3600000)

    Raises:
        ValueError: If spec format is invalid or unparseable
    """
    match = RATE_STRING_PATTERN.match(spec)
    if not match:
        raise ValueError(
            f"Invalid rate spec: {spec!r}. Expected format: '5/second', '300/minute', etc."
        )

    limit_str, duration_str = match.groups()
    limit = int(limit_str)

    duration_str = duration_str.lower()
    duration_str = DURATION_ALIASES.get(duration_str, duration_str)
    if duration_str not in DURATION_MS:
        raise ValueError(
            f"Unknown duration: {duration_str!r}. Supported: {list(DURATION_MS.keys())}"
        )

    if limit <= 0:
        raise ValueError(f"Limit must be positive, got: {limit}")

    return RateSpec(limit=limit, interval_ms=DURATION_MS[duration_str])


def normalize_rate_list(rates: Union[str, Sequence[str]]) -> List[RateSpec]:
    """Parse a list of rate strings (or one comma-separated string).

    pyrate-limiter expects windows ordered by interval, so the result is
    sorted ascending by interval; two windows sharing an interval are
    rejected.

    Raises:
        ValueError: If any rate spec is invalid or the list is empty
    """
    if isinstance(rates, str):
        rates = [part for part in rates.split(",") if part.strip()]
    parsed = sorted((parse_rate_string(r) for r in rates), key=lambda r: r.interval_ms)
    if not parsed:
        raise ValueError("At least one rate spec is required")

    for current, following in zip(parsed, parsed[1:]):
        if current.interval_ms == following.interval_ms:
            raise ValueError(f"Duplicate rate window: {current} and {following}")
    return parsed


def create_limiter(rates: Union[str, Sequence[str], Sequence[RateSpec]]) -> Limiter:
    """Build a non-raising in-memory :class:`pyrate_limiter.Limiter`.

    ``try_acquire`` on the result returns ``False`` instead of raising when
    the bucket is full, which is what the rate gate's polling loop expects.
    """
    if isinstance(rates, str) or (rates and isinstance(rates[0], str)):
        specs = normalize_rate_list(rates)  # type: ignore[arg-type]
    else:
        specs = sorted(rates, key=lambda r: r.interval_ms)  # type: ignore[arg-type]
    if not specs:
        raise ValueError("At least one rate spec is required")
    return Limiter([spec.to_rate() for spec in specs], raise_when_fail=False)


__all__ = [
    "RateSpec",
    "create_limiter",
    "normalize_rate_list",
    "parse_rate_string",
]
