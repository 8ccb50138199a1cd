"""src/btlr/ui/cli/signals.py
What: Translate SIGINT and SIGTERM into cancellation of a run.
Why: Let in-flight commands be killed and reported instead of tearing down the process.
"""

from __future__ import annotations

import signal
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from types import FrameType

from btlr.features.execution import CancellationToken
from btlr.platform.logging import logger

CANCEL_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


@contextmanager
def cancel_on_signals(
    token: CancellationToken,
    signals: Sequence[signal.Signals] = CANCEL_SIGNALS,
) -> Iterator[CancellationToken]:
    """Cancel ``token`` when one of ``signals`` arrives; restores prior handlers on exit.

    Handlers can only be installed from the main thread; elsewhere the token
    is yielded unchanged.
    """

    if threading.current_thread() is not threading.main_thread():
        yield token
        return

    def _handler(signum: int, _frame: FrameType | None) -> None:
        if not token.cancelled:
            logger.warning("Received %s, stopping running commands", signal.Signals(signum).name)
        token.cancel()

    previous = {sig: signal.signal(sig, _handler) for sig in signals}
    try:
        yield token
    finally:
        for sig, handler in previous.items():
            _ = signal.signal(sig, handler)


__all__ = ["CANCEL_SIGNALS", "cancel_on_signals"]
