"""
Summary: Aggregate per-operation outcomes into counts and a batch disposition.
Why: Keep exit-code policy out of the pool and the reporters.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum

from .models import StatusType
from .operation import Operation


class Disposition(StrEnum):
    """Overall outcome of a run."""

    SUCCESS = "success"
    FAILURE = "failure"
    INTERRUPTED = "interrupted"


def settled_status(operation: Operation) -> StatusType | None:
    """Return the final status, or ``None`` if the operation never completed."""

    if not operation.done() or operation.cancelled():
        return None
    return operation.result().status


@dataclass(slots=True, frozen=True)
class RunSummary:
    """Status counts for a batch of operations."""

    counts: Counter[StatusType] = field(default_factory=Counter)
    cancelled: int = 0

    @property
    def total(self) -> int:
        return sum(self.counts.values()) + self.cancelled

    @property
    def failed(self) -> bool:
        return self.counts[StatusType.FAILURE] > 0 or self.counts[StatusType.ERROR] > 0

    def disposition(self, interrupted: bool = False) -> Disposition:
        """Return the batch outcome; an interrupt wins over ordinary failures."""

        if interrupted or self.cancelled:
            return Disposition.INTERRUPTED
        if self.failed:
            return Disposition.FAILURE
        return Disposition.SUCCESS


def summarize(operations: Sequence[Operation]) -> RunSummary:
    counts: Counter[StatusType] = Counter()
    cancelled = 0
    for operation in operations:
        status = settled_status(operation)
        if status is None:
            cancelled += 1
        else:
            counts[status] += 1
    return RunSummary(counts=counts, cancelled=cancelled)


__all__ = ["Disposition", "RunSummary", "settled_status", "summarize"]
