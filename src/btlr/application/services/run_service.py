"""Application service orchestrating a ``btlr run``.

Where: src/btlr/application/services/run_service.py
What: Resolve patterns to directories, apply the optional filter pass, start the pool.
Why: Keep the CLI a thin layer over a testable, display-agnostic service.
"""

from __future__ import annotations

import logging
import shlex
import time
from collections.abc import Callable, Collection, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from btlr.features.execution import (
    CancellationToken,
    Operation,
    RunEvent,
    RunSummary,
    StatusType,
    WorkerPool,
    settled_status,
    summarize,
)
from btlr.features.matching import NoMatchError, collect_matches, reduce_to_directories
from btlr.platform.logging import logger

GIT_DIFF_COMMAND: Final[tuple[str, ...]] = ("git", "diff", "--exit-code")

PoolFactory = Callable[[int, float | None], WorkerPool]


def git_diff_filter(arguments: str) -> tuple[str, ...]:
    """Build the filter command for ``--git-diff ARGS``.

    Raises:
        ValueError: If ``arguments`` cannot be split into shell words.
    """

    return (*GIT_DIFF_COMMAND, *shlex.split(arguments))


@dataclass(slots=True, frozen=True)
class RunRequest:
    """Validated, immutable inputs for one run."""

    patterns: tuple[str, ...]
    command: tuple[str, ...]
    max_concurrency: int
    max_duration: float | None = None
    filter_command: tuple[str, ...] | None = None


@dataclass(slots=True)
class RunBatch:
    """Operations started together on one pool."""

    label: str
    operations: list[Operation]
    pool: WorkerPool
    started_at: float = field(default_factory=time.monotonic)

    @property
    def total(self) -> int:
        return len(self.operations)

    def completed(self) -> int:
        """Count the operations that have settled."""

        return sum(1 for operation in self.operations if operation.done())


class RunService:
    """Coordinate matching, filtering and execution for a run request."""

    def __init__(self, pool_factory: PoolFactory = WorkerPool) -> None:
        self._pool_factory: PoolFactory = pool_factory

    def collect_directories(self, patterns: Sequence[str]) -> list[Path]:
        """Resolve ``patterns`` to unique target directories.

        Raises:
            InvalidPatternError: If a pattern is malformed.
            NoMatchError: If no pattern matched anything.
            SetupError: If a matched path cannot be inspected.
        """

        matches = collect_matches(patterns)
        if not matches:
            raise NoMatchError(patterns)
        directories = reduce_to_directories(matches)
        logger.info(
            "Collected %d directories from %d matches",
            len(directories),
            len(matches),
            extra={
                "run_event": RunEvent.MATCH_COMPLETE.value,
                "directories": len(directories),
                "matches": len(matches),
            },
        )
        return directories

    def start_filter(
        self,
        request: RunRequest,
        directories: Sequence[Path],
        token: CancellationToken,
    ) -> RunBatch:
        """Start the filter command in every directory."""

        if request.filter_command is None:
            raise ValueError("request has no filter command")
        return self._start(
            "filter",
            request,
            [Operation(directory, request.filter_command) for directory in directories],
            token,
        )

    def changed_directories(self, batch: RunBatch) -> list[Path]:
        """Return directories whose filter did not succeed, i.e. that have changes."""

        changed = [
            operation.directory
            for operation in batch.operations
            if settled_status(operation) is not StatusType.SUCCESS
        ]
        logger.info(
            "Changes detected in %d of %d directories",
            len(changed),
            batch.total,
            extra={
                "run_event": RunEvent.FILTER_COMPLETE.value,
                "changed": len(changed),
                "total": batch.total,
            },
        )
        return changed

    def start_run(
        self,
        request: RunRequest,
        directories: Sequence[Path],
        token: CancellationToken,
        selected: Collection[Path] | None = None,
    ) -> RunBatch:
        """Start the primary command.

        Args:
            request: Run inputs.
            directories: Every candidate directory, in report order.
            token: Pool-wide cancellation token.
            selected: When given, directories outside it are marked skipped
                instead of being run.
        """

        operations = [Operation(directory, request.command) for directory in directories]
        if selected is not None:
            keep = set(selected)
            for operation in operations:
                if operation.directory not in keep:
                    operation.skip()
        return self._start("command", request, operations, token)

    def finish(self, batch: RunBatch, token: CancellationToken) -> RunSummary:
        """Wait for ``batch`` to settle and log its summary."""

        _ = batch.pool.join()
        summary = summarize(batch.operations)
        duration = time.monotonic() - batch.started_at
        if token.cancelled:
            logger.warning(
                "Interrupted while running %s",
                batch.label,
                extra={"run_event": RunEvent.BATCH_CANCELLED.value, "label": batch.label},
            )
        level = logging.INFO if not summary.failed else logging.WARNING
        logger.log(
            level,
            "Finished %s [success=%d, failure=%d, error=%d, skipped=%d, cancelled=%d]",
            batch.label,
            summary.counts[StatusType.SUCCESS],
            summary.counts[StatusType.FAILURE],
            summary.counts[StatusType.ERROR],
            summary.counts[StatusType.SKIPPED],
            summary.cancelled,
            extra={
                "run_event": RunEvent.BATCH_COMPLETE.value,
                "label": batch.label,
                "success": summary.counts[StatusType.SUCCESS],
                "failure": summary.counts[StatusType.FAILURE],
                "error": summary.counts[StatusType.ERROR],
                "skipped": summary.counts[StatusType.SKIPPED],
                "cancelled": summary.cancelled,
                "duration_seconds": round(duration, 4),
            },
        )
        return summary

    def run(self, request: RunRequest, token: CancellationToken) -> RunBatch:
        """Run ``request`` end to end without any display, blocking until settled."""

        directories = self.collect_directories(request.patterns)
        selected: list[Path] | None = None
        if request.filter_command is not None:
            filter_batch = self.start_filter(request, directories, token)
            _ = self.finish(filter_batch, token)
            if token.cancelled:
                return filter_batch
            selected = self.changed_directories(filter_batch)

        batch = self.start_run(request, directories, token, selected=selected)
        _ = self.finish(batch, token)
        return batch

    def _start(
        self,
        label: str,
        request: RunRequest,
        operations: list[Operation],
        token: CancellationToken,
    ) -> RunBatch:
        pool = self._pool_factory(request.max_concurrency, request.max_duration)
        logger.info(
            "Running %s in %d directories",
            label,
            len(operations),
            extra={
                "run_event": RunEvent.BATCH_START.value,
                "label": label,
                "total": len(operations),
                "concurrency": request.max_concurrency,
            },
        )
        pool.submit(operations, token)
        return RunBatch(label=label, operations=operations, pool=pool)


__all__ = ["GIT_DIFF_COMMAND", "RunBatch", "RunRequest", "RunService", "git_diff_filter"]
