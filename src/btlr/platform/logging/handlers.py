"""Rich console handler for structured run events.

Where: platform/logging/handlers.py
What: Render ``RunEvent`` log records with icons, colors and compact paths.
Why: Keep console output readable while many directories run in parallel.
"""

from __future__ import annotations

import logging
from pathlib import PurePath, PurePosixPath, PureWindowsPath
from typing import Any, ClassVar, override

from rich.console import ConsoleRenderable
from rich.logging import RichHandler
from rich.style import Style
from rich.text import Text


class RunEventRichHandler(RichHandler):
    """Rich handler that renders run events and shortens directory paths."""

    _EVENT_STYLES: ClassVar[dict[str, tuple[str, str]]] = {
        "run.match.complete": ("🔎", "cyan"),
        "run.filter.complete": ("🔀", "cyan"),
        "run.batch.start": ("🚀", "cyan"),
        "run.batch.complete": ("🏁", "green"),
        "run.batch.cancelled": ("⛔", "red"),
        "run.operation.start": ("▶", "blue"),
        "run.operation.success": ("✅", "green"),
        "run.operation.failure": ("❌", "red"),
        "run.operation.error": ("⚠️", "red"),
        "run.operation.skip": ("↪️", "yellow"),
    }
    _OPERATION_PREFIXES: ClassVar[dict[str, str]] = {
        "run.operation.start": "Running in ",
        "run.operation.success": "Succeeded in ",
        "run.operation.failure": "Failed in ",
        "run.operation.error": "Errored in ",
        "run.operation.skip": "Skipped ",
    }
    _PATH_SEGMENT_LIMIT: ClassVar[int] = 4

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs["show_time"] = False
        kwargs["show_path"] = False
        kwargs["show_level"] = False
        kwargs["rich_tracebacks"] = True
        kwargs["markup"] = False
        super().__init__(*args, **kwargs)

    def _format_path(self, path: str) -> Text:
        """Render ``path`` with at most four trailing segments."""

        pure_path = self._to_pure_path(path)
        separator = "\\" if isinstance(pure_path, PureWindowsPath) else "/"
        anchor = pure_path.anchor
        parts = [part for part in pure_path.parts if part and part != anchor]
        truncated = len(parts) > self._PATH_SEGMENT_LIMIT
        if truncated:
            parts = parts[-self._PATH_SEGMENT_LIMIT :]

        rendered = anchor.rstrip("\\/") + separator if anchor and not truncated else ""
        if truncated:
            rendered += "…" + separator
        rendered += separator.join(parts)

        text = Text()
        for char in rendered or ".":
            color = "magenta" if char in {separator, "…"} else "white"
            _ = text.append(char, style=Style(color=color))
        return text

    @staticmethod
    def _to_pure_path(raw_path: str) -> PurePath:
        if "\\" in raw_path:
            return PureWindowsPath(raw_path)
        return PurePosixPath(raw_path)

    def _render_batch(self, event: str, record: logging.LogRecord, body: Text) -> None:
        label = getattr(record, "label", None) or "command"
        if event == "run.match.complete":
            directories = getattr(record, "directories", None)
            matches = getattr(record, "matches", None)
            _ = body.append(f"Collected {directories} director(ies) from {matches} match(es)")
        elif event == "run.filter.complete":
            changed = getattr(record, "changed", None)
            total = getattr(record, "total", None)
            _ = body.append(f"Changes detected in {changed} of {total} director(ies)")
        elif event == "run.batch.start":
            total = getattr(record, "total", None)
            concurrency = getattr(record, "concurrency", None)
            _ = body.append(f"Running {label} [total={total}, concurrency={concurrency}]")
        elif event == "run.batch.cancelled":
            _ = body.append(f"Interrupted while running {label}")
        else:
            _ = body.append(f"Finished {label}")
            metrics = [
                f"{key}={getattr(record, key)}"
                for key in ("success", "failure", "error", "skipped", "cancelled")
                if isinstance(getattr(record, key, None), int)
            ]
            duration = getattr(record, "duration_seconds", None)
            if isinstance(duration, (int, float)):
                metrics.append(f"duration={duration:.2f}s")
            if metrics:
                _ = body.append(" [" + ", ".join(metrics) + "]")

    def _render_operation(self, event: str, record: logging.LogRecord, body: Text) -> None:
        _ = body.append(self._OPERATION_PREFIXES.get(event, ""))
        directory = getattr(record, "directory", None)
        if directory:
            _ = body.append_text(self._format_path(str(directory)))

        details: list[str] = []
        duration = getattr(record, "duration_seconds", None)
        if event != "run.operation.start" and isinstance(duration, (int, float)):
            details.append(f"{duration:.2f}s")
        error_message = getattr(record, "error_message", None)
        if event in {"run.operation.failure", "run.operation.error"} and error_message:
            details.append(str(error_message))
        if details:
            _ = body.append(" (" + ", ".join(details) + ")")

    def _render_run_message(self, record: logging.LogRecord) -> Text | None:
        """Render structured run events with dedicated styling."""

        event = getattr(record, "run_event", None)
        if not isinstance(event, str):
            return None

        icon, color = self._EVENT_STYLES.get(event, ("ℹ️", "blue"))
        text = Text()
        _ = text.append(f"{icon} ", style=Style(color=color, bold=True))

        body = Text(style=Style(color=color))
        if event.startswith("run.operation"):
            self._render_operation(event, record, body)
        else:
            self._render_batch(event, record, body)

        _ = text.append_text(body)
        return text

    @override
    def render_message(self, record: logging.LogRecord, message: str) -> ConsoleRenderable:
        run_text = self._render_run_message(record)
        if run_text is not None:
            return run_text
        return super().render_message(record, message)


__all__ = ["RunEventRichHandler"]
