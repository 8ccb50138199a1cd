"""src/btlr/features/execution/models.py
Where: Execution feature layer.
What: Shared enums and result dataclasses for per-directory command runs.
Why: Keep the operation and pool modules lean by centralising type definitions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class StatusType(StrEnum):
    """Terminal classification of an operation."""

    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    SKIPPED = "SKIPPED"
    ERROR = "ERROR"


class RunEvent(StrEnum):
    """Structured event identifiers for run logs."""

    MATCH_COMPLETE = "run.match.complete"
    FILTER_COMPLETE = "run.filter.complete"
    BATCH_START = "run.batch.start"
    BATCH_COMPLETE = "run.batch.complete"
    BATCH_CANCELLED = "run.batch.cancelled"
    OPERATION_START = "run.operation.start"
    OPERATION_SUCCESS = "run.operation.success"
    OPERATION_FAILURE = "run.operation.failure"
    OPERATION_ERROR = "run.operation.error"
    OPERATION_SKIP = "run.operation.skip"


STATUS_EVENTS: dict[StatusType, RunEvent] = {
    StatusType.SUCCESS: RunEvent.OPERATION_SUCCESS,
    StatusType.FAILURE: RunEvent.OPERATION_FAILURE,
    StatusType.ERROR: RunEvent.OPERATION_ERROR,
    StatusType.SKIPPED: RunEvent.OPERATION_SKIP,
}


@dataclass(slots=True, frozen=True)
class RunResult:
    """Captured outcome of a command executed in one directory."""

    status: StatusType
    stdout: bytes = b""
    stderr: bytes = b""
    combined: bytes = b""
    error: str | None = None
    return_code: int | None = None
    duration_seconds: float = 0.0

    @property
    def stdout_text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")

    @property
    def combined_text(self) -> str:
        """Interleaved stdout and stderr, decoded for display."""

        return self.combined.decode("utf-8", errors="replace")


SKIPPED_RESULT = RunResult(status=StatusType.SKIPPED)


__all__ = ["RunEvent", "RunResult", "SKIPPED_RESULT", "STATUS_EVENTS", "StatusType"]
