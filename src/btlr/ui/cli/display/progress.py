"""Progress display functionality for CLI."""

import time
from collections.abc import Callable
from contextlib import nullcontext
from typing import Any, Final, final

from rich.progress import Progress, TaskID

from btlr.application.services.run_service import RunBatch
from btlr.features.execution import Operation
from btlr.platform.logging import console_of, logger

REFRESH_INTERVAL_SECONDS: Final[float] = 0.1


@final
class ProgressDisplay:
    """Follows a running batch, reporting operations in order as they settle."""

    def __init__(self, enabled: bool = False, refresh_interval: float = REFRESH_INTERVAL_SECONDS) -> None:
        """Initialize the display.

        Args:
            enabled: Whether to draw a live progress bar.
            refresh_interval: Seconds between progress refreshes.
        """
        self.enabled: bool = enabled
        self.refresh_interval: float = refresh_interval

    def follow(
        self,
        batch: RunBatch,
        description: str,
        on_result: Callable[[Operation], None] | None = None,
    ) -> None:
        """Block until every operation in ``batch`` has settled.

        Args:
            batch: Batch started by the run service.
            description: Label shown next to the progress bar.
            on_result: Called once per operation, in input order, as soon as
                it and every operation before it have settled.
        """
        progress = self._create_progress() if self.enabled else None
        with progress if progress is not None else nullcontext():
            task_id: TaskID | None = None
            if progress is not None:
                task_id = progress.add_task(self._label(description, 0, batch.total), total=batch.total)

            next_index = 0
            while True:
                while next_index < batch.total and batch.operations[next_index].done():
                    if on_result is not None:
                        on_result(batch.operations[next_index])
                    next_index += 1

                if progress is not None and task_id is not None:
                    completed = batch.completed()
                    progress.update(
                        task_id,
                        completed=completed,
                        description=self._label(description, completed, batch.total),
                    )

                if next_index >= batch.total:
                    break
                if batch.pool.finished and not batch.operations[next_index].done():
                    # Workers died without settling everything; the pool join reports why.
                    logger.debug("Workers exited with %d operation(s) unsettled", batch.total - next_index)
                    break
                time.sleep(self.refresh_interval)

    @staticmethod
    def _label(description: str, completed: int, total: int) -> str:
        return f"[cyan]{description} [{completed} of {total} complete]"

    @staticmethod
    def _create_progress() -> Progress:
        progress_kwargs: dict[str, Any] = {
            "transient": True,
            "redirect_stdout": True,
            "redirect_stderr": False,
        }
        progress_console = console_of(logger)
        if progress_console is not None:
            progress_kwargs["console"] = progress_console
        return Progress(**progress_kwargs)
