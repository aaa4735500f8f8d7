# === NAVMAP v1 ===
# {
#   "module": "tests.test_cancellation",
#   "purpose": "Tests for the cancellation primitives used by the client core.",
#   "sections": [
#     {"id": "tests", "name": "Test Cases", "anchor": "TST", "kind": "tests"}
#   ]
# }
# === /NAVMAP ===

"""Tests for the cancellation primitives used by the client core."""

import threading
import time

import pytest

import RestKit
from RestKit import cancellation
from RestKit.cancellation import CancellationToken


def test_token_is_the_only_cancellation_primitive() -> None:
    """Calls take a single token; there is no group type to manage."""

    assert cancellation.__all__ == ["CancellationToken"]
    assert not hasattr(RestKit, "CancellationTokenGroup")


def test_deadline_expires() -> None:
    """A token with a zero budget is cancelled immediately."""

    token = CancellationToken(timeout=0)
    assert token.is_cancelled()
    assert token.remaining() == 0.0


def test_remaining_without_deadline() -> None:
    assert CancellationToken().remaining() is None


def test_negative_timeout_rejected() -> None:
    with pytest.raises(ValueError):
        CancellationToken(timeout=-1)


def test_wait_wakes_on_cancel() -> None:
    """``wait`` returns early once another thread cancels the token."""

    token = CancellationToken()
    timer = threading.Timer(0.05, token.cancel)
    timer.start()
    started = time.monotonic()
    try:
        assert token.wait(5.0) is True
    finally:
        timer.cancel()
    assert time.monotonic() - started < 2.0


def test_wait_is_capped_by_deadline() -> None:
    token = CancellationToken(timeout=0.05)
    started = time.monotonic()
    assert token.wait(5.0) is True
    assert time.monotonic() - started < 2.0


def test_reset_clears_explicit_cancel() -> None:
    token = CancellationToken()
    token.cancel()
    token.reset()
    assert not token.is_cancelled()
    assert token.wait(0) is False
