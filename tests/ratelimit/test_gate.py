# === NAVMAP v1 ===
# {
#   "module": "tests.ratelimit.test_gate",
#   "purpose": "Behavioural checks for the rate gate.",
#   "sections": [
#     {"id": "tests", "name": "Test Cases", "anchor": "TST", "kind": "tests"}
#   ]
# }
# === /NAVMAP ===

"""Behavioural checks for the rate gate."""

from __future__ import annotations

import logging
from typing import List

import pytest

from RestKit.cancellation import CancellationToken
from RestKit.errors import ThrottledError
from RestKit.ratelimit import RateGate, create_limiter


class _StubLimiter:
    """Limiter double that simulates temporary exhaustion."""

    def __init__(self, failures: int) -> None:
        self._failures_remaining = failures
        self.calls: List[int] = []

    def try_acquire(self, name: str, weight: int = 1) -> bool:
        self.calls.append(weight)
        if self._failures_remaining > 0:
            self._failures_remaining -= 1
            return False
        return True


class _BrokenLimiter:
    def try_acquire(self, name: str, weight: int = 1) -> bool:
        raise RuntimeError("bucket backend unavailable")


def test_no_limiter_admits_immediately() -> None:
    gate = RateGate()
    assert gate.limiter is None
    gate.acquire(CancellationToken(timeout=0))


def test_acquire_waits_when_exhausted(monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture) -> None:
    """``acquire`` keeps polling while the limiter is temporarily exhausted."""

    limiter = _StubLimiter(failures=2)
    gate = RateGate(limiter, poll_interval=0.01, max_poll_interval=0.015)
    sleep_calls: List[float] = []

    monkeypatch.setattr("RestKit.ratelimit.gate.time.sleep", sleep_calls.append)

    with caplog.at_level(logging.DEBUG, logger="RestKit.ratelimit.gate"):
        gate.acquire()

    assert limiter.calls == [1, 1, 1]
    assert sleep_calls == [0.01, 0.015]
    assert any(record.message == "Rate limit acquired" for record in caplog.records)


def test_cancelled_token_is_throttled_without_polling() -> None:
    """A cancelled caller never consumes a slot."""

    limiter = _StubLimiter(failures=0)
    token = CancellationToken()
    token.cancel()

    with pytest.raises(ThrottledError) as excinfo:
        RateGate(limiter).acquire(token)

    assert str(excinfo.value) == "too many requests"
    assert limiter.calls == []


def test_deadline_while_waiting(caplog: pytest.LogCaptureFixture) -> None:
    """An exhausted limiter plus an expiring token ends in a denial."""

    limiter = _StubLimiter(failures=10_000)
    gate = RateGate(limiter, poll_interval=0.005, max_poll_interval=0.01)

    with caplog.at_level(logging.WARNING, logger="RestKit.ratelimit.gate"):
        with pytest.raises(ThrottledError):
            gate.acquire(CancellationToken(timeout=0.05))

    assert limiter.calls
    assert any(record.message == "Rate limit denied" for record in caplog.records)


def test_limiter_failure_is_throttled() -> None:
    with pytest.raises(ThrottledError) as excinfo:
        RateGate(_BrokenLimiter()).acquire()
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_weight_must_be_positive() -> None:
    with pytest.raises(ValueError):
        RateGate(_StubLimiter(0)).acquire(weight=0)


def test_invalid_poll_intervals() -> None:
    with pytest.raises(ValueError):
        RateGate(poll_interval=0.5, max_poll_interval=0.1)


def test_pyrate_limiter_window() -> None:
    """The gate enforces a real pyrate-limiter window."""

    gate = RateGate(create_limiter("2/minute"))
    gate.acquire()
    gate.acquire()
    with pytest.raises(ThrottledError):
        gate.acquire(CancellationToken(timeout=0.05))


def test_limiter_failure_logged_with_bucket(caplog: pytest.LogCaptureFixture) -> None:
    """Failure records carry the bucket name and still raise ThrottledError."""

    with caplog.at_level(logging.DEBUG, logger="RestKit.ratelimit.gate"):
        with pytest.raises(ThrottledError):
            RateGate(_BrokenLimiter(), name="search").acquire()

    failed = [record for record in caplog.records if record.message == "Rate limiter failed"]
    assert failed[0].bucket == "search"
    assert failed[0].error == "bucket backend unavailable"
