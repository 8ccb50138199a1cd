"""Bounded-concurrency execution of per-directory operations.

Where: src/btlr/features/execution/pool.py
What: Start a fixed number of workers that drain a shared queue of operations.
Why: Run one command in many directories without oversubscribing the machine.
"""

from __future__ import annotations

import queue
from collections.abc import Iterable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait
from pathlib import Path

from btlr.platform.logging import logger

from .cancellation import CancellationToken
from .operation import Operation


class WorkerPool:
    """Execute operations on ``max_concurrency`` worker threads.

    Every submitted operation is queued before the workers start; each
    worker claims the next queued operation until the queue is empty. Once
    the cancellation token fires, workers stop claiming and abandon whatever
    is still queued, while in-flight commands are killed by their operation.
    """

    def __init__(self, max_concurrency: int, max_duration: float | None = None) -> None:
        """Initialize the pool.

        Args:
            max_concurrency: Number of workers; must be positive.
            max_duration: Per-operation timeout in seconds. ``None`` or ``0``
                disables the timeout.
        """
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be positive, got {max_concurrency}")
        if max_duration is not None and max_duration < 0:
            raise ValueError(f"max_duration must not be negative, got {max_duration}")
        self.max_concurrency: int = max_concurrency
        self.max_duration: float | None = max_duration or None
        self._workers: list[Future[None]] = []

    def run(
        self,
        directories: Iterable[Path | str],
        command: Sequence[str],
        token: CancellationToken,
    ) -> list[Operation]:
        """Start ``command`` in every directory and return the handles in input order."""

        operations = [Operation(directory, command) for directory in directories]
        self.submit(operations, token)
        return operations

    def submit(self, operations: Sequence[Operation], token: CancellationToken) -> None:
        """Queue pre-built operations; already settled ones (e.g. skipped) are ignored."""

        work: queue.Queue[Operation] = queue.Queue()
        for operation in operations:
            if not operation.done():
                work.put(operation)

        logger.debug(
            "Starting %d worker(s) for %d operation(s) [timeout=%s]",
            self.max_concurrency,
            work.qsize(),
            self.max_duration,
        )
        executor = ThreadPoolExecutor(
            max_workers=self.max_concurrency,
            thread_name_prefix="btlr-worker",
        )
        try:
            for _ in range(self.max_concurrency):
                self._workers.append(executor.submit(self._work, work, token))
        finally:
            executor.shutdown(wait=False)

    def _work(self, work: queue.Queue[Operation], token: CancellationToken) -> None:
        while True:
            try:
                operation = work.get_nowait()
            except queue.Empty:
                return
            if token.cancelled:
                _ = operation.abandon()
                continue
            operation.execute(token, timeout=self.max_duration)

    @property
    def finished(self) -> bool:
        """Return whether every worker has exited."""

        return all(worker.done() for worker in self._workers)

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the workers to exit, re-raising any unexpected worker error.

        Returns:
            bool: Whether every worker exited within ``timeout``.
        """

        done, pending = wait(self._workers, timeout=timeout)
        for worker in done:
            worker.result()
        return not pending


__all__ = ["WorkerPool"]
