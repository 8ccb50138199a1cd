"""Tests for cancellation tokens."""

from __future__ import annotations

import threading
import time

from btlr.features.execution import CancellationToken, CancelReason


def test_new_token_is_live() -> None:
    token = CancellationToken()

    assert token.reason is None
    assert not token.cancelled


def test_cancel_keeps_first_reason() -> None:
    """Cancelling is one-way; later calls do not overwrite the reason."""

    token = CancellationToken()
    token.cancel()
    token.cancel(CancelReason.DEADLINE_EXCEEDED)

    assert token.cancelled
    assert token.reason is CancelReason.INTERRUPTED


def test_child_expires_without_affecting_parent() -> None:
    """A derived token reports its own deadline while the parent stays live."""

    parent = CancellationToken()
    child = parent.with_timeout(0.05)
    assert child.reason is None

    time.sleep(0.1)

    assert child.reason is CancelReason.DEADLINE_EXCEEDED
    assert not parent.cancelled


def test_child_observes_parent_cancellation() -> None:
    """Cancelling the parent cancels children with the parent's reason."""

    parent = CancellationToken()
    child = parent.with_timeout(60)

    parent.cancel()

    assert child.reason is CancelReason.INTERRUPTED


def test_cancel_from_another_thread_is_visible() -> None:
    """A token cancelled on one thread reads as cancelled on another."""

    token = CancellationToken()
    worker = threading.Thread(target=token.cancel)
    worker.start()
    worker.join()

    assert token.reason is CancelReason.INTERRUPTED
