"""Tests for translating signals into cancellation."""

from __future__ import annotations

import os
import signal
import threading

import pytest

from btlr.features.execution import CancellationToken
from btlr.ui.cli.signals import cancel_on_signals


@pytest.mark.skipif(os.name != "posix", reason="raising SIGTERM in-process requires POSIX")
def test_sigterm_cancels_token() -> None:
    token = CancellationToken()

    with cancel_on_signals(token):
        signal.raise_signal(signal.SIGTERM)

    assert token.cancelled


def test_handlers_are_restored() -> None:
    before = signal.getsignal(signal.SIGINT)

    with cancel_on_signals(CancellationToken()):
        assert signal.getsignal(signal.SIGINT) is not before

    assert signal.getsignal(signal.SIGINT) is before


def test_sigint_cancels_instead_of_raising() -> None:
    """SIGINT no longer raises ``KeyboardInterrupt`` while the run is guarded."""

    token = CancellationToken()

    with cancel_on_signals(token):
        signal.raise_signal(signal.SIGINT)

    assert token.cancelled


def test_worker_threads_leave_handlers_alone() -> None:
    """Off the main thread the token is passed through untouched."""

    token = CancellationToken()
    before = signal.getsignal(signal.SIGINT)
    observed: list[object] = []

    def _enter() -> None:
        with cancel_on_signals(token) as guarded:
            observed.append(guarded)
            observed.append(signal.getsignal(signal.SIGINT))

    thread = threading.Thread(target=_enter)
    thread.start()
    thread.join()

    assert observed == [token, before]
