"""Tests for the run orchestration service."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Callable
from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from btlr.application.services.run_service import RunRequest, RunService, git_diff_filter
from btlr.features.execution import CancellationToken, RunEvent, StatusType, WorkerPool
from btlr.features.matching import NoMatchError

REMOVE_FOO = (sys.executable, "-c", "import os; os.remove('foo.txt')")
HAS_CHANGES = (sys.executable, "-c", "import os, sys; sys.exit(0 if os.path.exists('clean') else 1)")


def _events(caplog: pytest.LogCaptureFixture) -> list[str]:
    return [getattr(record, "run_event") for record in caplog.records if hasattr(record, "run_event")]


@pytest.fixture
def foo_bar_tree(make_tree: Callable[..., Path]) -> Path:
    return make_tree("foo/foo.txt", "foo/bar.txt", "bar/bar.txt")


def test_collect_directories_reduces_and_logs(foo_bar_tree: Path, caplog: pytest.LogCaptureFixture) -> None:
    """Matches are reduced to unique directories in walk order."""

    with caplog.at_level(logging.INFO, logger="btlr"):
        directories = RunService().collect_directories([os.path.join(str(foo_bar_tree), "**", "*.txt")])

    assert directories == [foo_bar_tree / "bar", foo_bar_tree / "foo"]
    record = next(r for r in caplog.records if getattr(r, "run_event", None) == RunEvent.MATCH_COMPLETE)
    assert getattr(record, "directories") == 2
    assert getattr(record, "matches") == 3


def test_collect_directories_without_matches_raises(tmp_path: Path) -> None:
    with pytest.raises(NoMatchError) as exc_info:
        _ = RunService().collect_directories([str(tmp_path / "*.nothing"), str(tmp_path / "*.none")])

    assert str(exc_info.value) == (
        f"no paths match pattern(s): '{tmp_path / '*.nothing'} {tmp_path / '*.none'}'"
    )


def test_run_reports_success_and_failure_per_directory(
    foo_bar_tree: Path, caplog: pytest.LogCaptureFixture
) -> None:
    """Removing ``foo.txt`` succeeds only where the file exists."""

    request = RunRequest(
        patterns=(os.path.join(str(foo_bar_tree), "**", "*.txt"),),
        command=REMOVE_FOO,
        max_concurrency=2,
    )

    with caplog.at_level(logging.DEBUG, logger="btlr"):
        batch = RunService().run(request, CancellationToken())

    statuses = {operation.directory.name: operation.result().status for operation in batch.operations}
    assert statuses == {"bar": StatusType.FAILURE, "foo": StatusType.SUCCESS}
    assert not (foo_bar_tree / "foo" / "foo.txt").exists()
    events = _events(caplog)
    assert events.index(RunEvent.BATCH_START) < events.index(RunEvent.BATCH_COMPLETE)
    assert RunEvent.OPERATION_FAILURE in events


def test_filter_skips_directories_without_changes(make_tree: Callable[..., Path]) -> None:
    """Directories where the filter succeeds are skipped by the primary run."""

    root = make_tree("clean/foo.txt", "clean/clean", "dirty/foo.txt")
    request = RunRequest(
        patterns=(os.path.join(str(root), "*", "foo.txt"),),
        command=REMOVE_FOO,
        max_concurrency=2,
        filter_command=HAS_CHANGES,
    )

    batch = RunService().run(request, CancellationToken())

    statuses = {operation.directory.name: operation.result().status for operation in batch.operations}
    assert statuses == {"clean": StatusType.SKIPPED, "dirty": StatusType.SUCCESS}
    assert (root / "clean" / "foo.txt").exists()


def test_changed_directories_counts_non_success(make_tree: Callable[..., Path]) -> None:
    root = make_tree("a/clean", "b/file", "c/file")
    service = RunService()
    request = RunRequest(patterns=(), command=REMOVE_FOO, max_concurrency=1, filter_command=HAS_CHANGES)
    token = CancellationToken()

    batch = service.start_filter(request, [root / "a", root / "b", root / "c"], token)
    summary = service.finish(batch, token)

    assert summary.counts[StatusType.SUCCESS] == 1
    assert service.changed_directories(batch) == [root / "b", root / "c"]


def test_start_filter_requires_filter_command(tmp_path: Path) -> None:
    request = RunRequest(patterns=(), command=REMOVE_FOO, max_concurrency=1)

    with pytest.raises(ValueError):
        _ = RunService().start_filter(request, [tmp_path], CancellationToken())


def test_interrupted_filter_stops_before_primary_run(make_tree: Callable[..., Path]) -> None:
    """A run interrupted during the filter pass never starts the command."""

    root = make_tree("foo/foo.txt")
    token = CancellationToken()
    token.cancel()
    request = RunRequest(
        patterns=(os.path.join(str(root), "*", "foo.txt"),),
        command=REMOVE_FOO,
        max_concurrency=1,
        filter_command=HAS_CHANGES,
    )

    batch = RunService().run(request, token)

    assert batch.label == "filter"
    assert all(operation.cancelled() for operation in batch.operations)
    assert (root / "foo" / "foo.txt").exists()


def test_pool_receives_request_limits(tmp_path: Path, mocker: MockerFixture) -> None:
    """The pool is built from the request's concurrency and duration."""

    factory = mocker.Mock(spec=WorkerPool)
    service = RunService(pool_factory=factory)
    request = RunRequest(patterns=(), command=REMOVE_FOO, max_concurrency=7, max_duration=1.5)

    batch = service.start_run(request, [tmp_path], CancellationToken())

    factory.assert_called_once_with(7, 1.5)
    factory.return_value.submit.assert_called_once()
    assert batch.total == 1
    assert batch.completed() == 0


def test_start_run_marks_unselected_directories_skipped(tmp_path: Path, mocker: MockerFixture) -> None:
    factory = mocker.Mock(spec=WorkerPool)
    first, second = tmp_path / "first", tmp_path / "second"

    batch = RunService(pool_factory=factory).start_run(
        RunRequest(patterns=(), command=REMOVE_FOO, max_concurrency=1),
        [first, second],
        CancellationToken(),
        selected=[second],
    )

    assert batch.operations[0].skipped
    assert not batch.operations[1].done()


def test_git_diff_filter_splits_arguments() -> None:
    assert git_diff_filter('main -- "a dir"') == ("git", "diff", "--exit-code", "main", "--", "a dir")


def test_git_diff_filter_rejects_bad_quoting() -> None:
    with pytest.raises(ValueError):
        _ = git_diff_filter('"unterminated')
