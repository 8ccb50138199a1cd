"""
Summary: Execution feature exports for operations, the worker pool and batch aggregation.
Why: Give callers one import path for running commands across directories.
"""

from .cancellation import CancelReason, CancellationToken
from .models import RunEvent, RunResult, StatusType
from .operation import Operation
from .pool import WorkerPool
from .summary import Disposition, RunSummary, settled_status, summarize

__all__ = [
    "CancelReason",
    "CancellationToken",
    "Disposition",
    "Operation",
    "RunEvent",
    "RunResult",
    "RunSummary",
    "StatusType",
    "WorkerPool",
    "settled_status",
    "summarize",
]
