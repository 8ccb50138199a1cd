"""Tests for the end-of-run summary rendering."""

from __future__ import annotations

import sys
from io import StringIO
from pathlib import Path

from rich.console import Console

from btlr.features.execution import CancellationToken, Operation, summarize
from btlr.ui.cli.display.summary import format_counts, format_status_line, render_run_summary


def test_format_status_line_is_eighty_columns() -> None:
    line = format_status_line("path/to/dir", "SUCCESS")

    assert line == "path/to/dir" + "." * 59 + "[ SUCCESS]"
    assert len(line) == 80


def test_format_status_line_truncates_long_directories() -> None:
    directory = "d" * 100

    line = format_status_line(directory, "FAILURE")

    assert line == "d" * 67 + "..." + "[ FAILURE]"


def test_render_run_summary(tmp_path: Path) -> None:
    """Counts come first, then one line per directory that was not skipped."""

    ran = Operation(tmp_path / "ran", [sys.executable, "-c", "pass"])
    (tmp_path / "ran").mkdir()
    ran.execute(CancellationToken())
    skipped = Operation(tmp_path / "skipped", ["make"])
    skipped.skip()
    abandoned = Operation(tmp_path / "abandoned", ["make"])
    _ = abandoned.abandon()
    operations = [ran, skipped, abandoned]
    buffer = StringIO()

    render_run_summary(Console(file=buffer, width=80), operations, summarize(operations))

    output = buffer.getvalue()
    assert "\n#\n# Summary\n#\n" in output
    assert "SUCCESS: 1, FAILURE: 0, SKIPPED: 1, ERROR: 0, CANCELLED: 1" in output
    assert "[ SUCCESS]" in output
    assert "[CANCELLED]" in output
    assert "skipped" not in output


def test_format_counts_omits_cancelled_when_zero(tmp_path: Path) -> None:
    skipped = Operation(tmp_path, ["make"])
    skipped.skip()

    assert format_counts(summarize([skipped])) == "SUCCESS: 0, FAILURE: 0, SKIPPED: 1, ERROR: 0"
