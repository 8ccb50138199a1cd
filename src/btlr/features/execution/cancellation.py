"""Cancellation tokens shared between the CLI and the worker pool.

Where: src/btlr/features/execution/cancellation.py
What: One-way cancellation flags with an optional deadline and parent token.
Why: Thread one explicit interrupt signal through every running operation.
"""

from __future__ import annotations

import threading
import time
from enum import StrEnum
from typing import Final


class CancelReason(StrEnum):
    """Why a token was cancelled."""

    INTERRUPTED = "interrupted"
    DEADLINE_EXCEEDED = "deadline exceeded"


class CancellationToken:
    """Thread-safe, set-once cancellation flag.

    A token derived with :meth:`with_timeout` is cancelled when its parent is
    cancelled or when its own deadline passes, whichever comes first. The
    parent is never affected by its children.
    """

    def __init__(
        self,
        parent: CancellationToken | None = None,
        deadline: float | None = None,
    ) -> None:
        self._parent: Final[CancellationToken | None] = parent
        self._deadline: Final[float | None] = deadline
        self._lock: Final[threading.Lock] = threading.Lock()
        self._reason: CancelReason | None = None

    def cancel(self, reason: CancelReason = CancelReason.INTERRUPTED) -> None:
        """Cancel the token; later calls keep the first reason."""

        with self._lock:
            if self._reason is not None:
                return
            self._reason = reason

    @property
    def reason(self) -> CancelReason | None:
        """Return why the token is cancelled, or ``None`` while it is live."""

        if self._reason is None:
            parent_reason = self._parent.reason if self._parent is not None else None
            if parent_reason is not None:
                self.cancel(parent_reason)
            elif self._deadline is not None and time.monotonic() >= self._deadline:
                self.cancel(CancelReason.DEADLINE_EXCEEDED)
        return self._reason

    @property
    def cancelled(self) -> bool:
        return self.reason is not None

    def with_timeout(self, seconds: float) -> CancellationToken:
        """Derive a child token that also expires ``seconds`` from now."""

        return CancellationToken(parent=self, deadline=time.monotonic() + seconds)


__all__ = ["CancelReason", "CancellationToken"]
