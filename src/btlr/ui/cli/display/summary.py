"""Utilities for rendering the end-of-run summary."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

from rich.console import Console

from btlr.features.execution import Operation, RunSummary, StatusType, settled_status

SUMMARY_ORDER: Final[tuple[StatusType, ...]] = (
    StatusType.SUCCESS,
    StatusType.FAILURE,
    StatusType.SKIPPED,
    StatusType.ERROR,
)
DIRECTORY_WIDTH: Final[int] = 67
FILL_WIDTH: Final[int] = 70
CANCELLED_LABEL: Final[str] = "CANCELLED"


def format_counts(summary: RunSummary) -> str:
    """Render ``SUCCESS: n, FAILURE: n, SKIPPED: n, ERROR: n`` (plus cancelled, if any)."""

    parts = [f"{status}: {summary.counts[status]}" for status in SUMMARY_ORDER]
    if summary.cancelled:
        parts.append(f"{CANCELLED_LABEL}: {summary.cancelled}")
    return ", ".join(parts)


def format_status_line(directory: str, label: str) -> str:
    """Render an 80-column ``path/to/dir.....[ STATUS]`` line."""

    shown = directory[:DIRECTORY_WIDTH]
    return f"{shown}{'.' * (FILL_WIDTH - len(shown))}[{label:>8}]"


def render_run_summary(
    console: Console,
    operations: Sequence[Operation],
    summary: RunSummary,
) -> None:
    """Render status counts followed by one line per non-skipped directory.

    Args:
        console: Rich console instance used to render output.
        operations: Operations of the primary run, in input order.
        summary: Aggregated counts for ``operations``.
    """
    _print(console, "\n#\n# Summary\n#\n")
    _print(console, format_counts(summary))

    for operation in operations:
        status = settled_status(operation)
        if status is StatusType.SKIPPED:
            continue
        label = CANCELLED_LABEL if status is None else str(status)
        _print(console, format_status_line(str(operation.directory), label))


def _print(console: Console, text: str) -> None:
    console.print(text, markup=False, highlight=False, soft_wrap=True)


__all__ = ["format_counts", "format_status_line", "render_run_summary"]
