"""Tests for the bounded worker pool."""

from __future__ import annotations

import sys
import threading
import time
from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from btlr.features.execution import CancellationToken, Operation, StatusType, WorkerPool


class _ConcurrencyTracker:
    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.active = 0
        self.peak = 0


class _TrackedOperation(Operation):
    """Operation that records how many siblings run at the same time."""

    def __init__(self, directory: Path, command: list[str], tracker: _ConcurrencyTracker) -> None:
        super().__init__(directory, command)
        self.tracker = tracker

    def execute(self, token: CancellationToken, timeout: float | None = None) -> None:
        with self.tracker.lock:
            self.tracker.active += 1
            self.tracker.peak = max(self.tracker.peak, self.tracker.active)
        try:
            super().execute(token, timeout)
        finally:
            with self.tracker.lock:
                self.tracker.active -= 1


def _sleep(seconds: float) -> list[str]:
    return [sys.executable, "-c", f"import time; time.sleep({seconds})"]


@pytest.mark.parametrize(("max_concurrency", "max_duration"), [(0, None), (-1, None), (1, -1.0)])
def test_pool_rejects_invalid_limits(max_concurrency: int, max_duration: float | None) -> None:
    with pytest.raises(ValueError):
        _ = WorkerPool(max_concurrency, max_duration)


def test_run_returns_operations_in_input_order(tmp_path: Path) -> None:
    """Handles come back in input order and all of them settle."""

    directories = [tmp_path / name for name in ("c", "a", "b")]
    for directory in directories:
        directory.mkdir()

    pool = WorkerPool(2)
    operations = pool.run(directories, [sys.executable, "-c", "pass"], CancellationToken())

    assert pool.join(timeout=30)
    assert pool.finished
    assert [operation.directory for operation in operations] == directories
    assert all(operation.result().status is StatusType.SUCCESS for operation in operations)


def test_pool_never_exceeds_max_concurrency(tmp_path: Path) -> None:
    """No more than ``max_concurrency`` commands run at once."""

    tracker = _ConcurrencyTracker()
    operations = [_TrackedOperation(tmp_path, _sleep(0.1), tracker) for _ in range(6)]

    pool = WorkerPool(2)
    pool.submit(operations, CancellationToken())

    assert pool.join(timeout=60)
    assert 1 <= tracker.peak <= 2
    assert all(operation.result().status is StatusType.SUCCESS for operation in operations)


def test_pool_applies_per_operation_timeout(tmp_path: Path) -> None:
    pool = WorkerPool(1, max_duration=0.2)
    operations = pool.run([tmp_path], _sleep(30), CancellationToken())

    assert pool.join(timeout=20)
    result = operations[0].result()
    assert result.status is StatusType.ERROR
    assert result.error is not None and "timed out after 0.2s" in result.error


def test_timeout_starts_when_operation_starts(tmp_path: Path) -> None:
    """Time spent waiting in the queue does not count against the timeout."""

    directories = [tmp_path / str(index) for index in range(4)]
    for directory in directories:
        directory.mkdir()

    pool = WorkerPool(1, max_duration=1.5)
    started = time.monotonic()
    operations = pool.run(directories, _sleep(0.6), CancellationToken())

    assert pool.join(timeout=30)
    assert time.monotonic() - started > 1.5
    assert [operation.result().status for operation in operations] == [StatusType.SUCCESS] * 4


def test_cancellation_kills_running_and_abandons_queued(tmp_path: Path) -> None:
    """In-flight commands are killed; queued ones are abandoned without running."""

    token = CancellationToken()
    pool = WorkerPool(2)
    operations = pool.run([tmp_path] * 4, _sleep(30), token)

    time.sleep(0.5)
    token.cancel()

    assert pool.join(timeout=20)
    assert all(operation.done() for operation in operations)
    for operation in operations[:2]:
        result = operation.result()
        assert result.status is StatusType.ERROR
        assert result.error is not None and "interrupted before complete" in result.error
    assert all(operation.cancelled() for operation in operations[2:])


def test_cancelled_token_abandons_everything(tmp_path: Path) -> None:
    token = CancellationToken()
    token.cancel()

    pool = WorkerPool(3)
    operations = pool.run([tmp_path] * 5, _sleep(30), token)

    assert pool.join(timeout=10)
    assert all(operation.cancelled() for operation in operations)


def test_settled_operations_are_not_resubmitted(tmp_path: Path, mocker: MockerFixture) -> None:
    """Skipped operations keep their result and are never executed."""

    execute = mocker.spy(Operation, "execute")
    skipped = Operation(tmp_path, _sleep(30))
    skipped.skip()

    pool = WorkerPool(1)
    pool.submit([skipped], CancellationToken())

    assert pool.join(timeout=5)
    assert skipped.result().status is StatusType.SKIPPED
    execute.assert_not_called()


def test_join_reraises_worker_errors(tmp_path: Path, mocker: MockerFixture) -> None:
    _ = mocker.patch.object(Operation, "execute", side_effect=RuntimeError("boom"))

    pool = WorkerPool(1)
    _ = pool.run([tmp_path], _sleep(0), CancellationToken())

    with pytest.raises(RuntimeError, match="boom"):
        _ = pool.join(timeout=5)
