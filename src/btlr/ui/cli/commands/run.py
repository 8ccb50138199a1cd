"""Run command implementation."""

from pathlib import Path
from typing import final, override

from btlr.features.execution import CancellationToken, Disposition
from btlr.platform.logging import logger
from btlr.ui.cli.commands.executor import CommandExecutor
from btlr.ui.cli.display.summary import render_run_summary


@final
class RunCommand(CommandExecutor):
    """Runs the command in every matched directory and reports the results."""

    @override
    def execute(self, token: CancellationToken) -> Disposition:
        """Execute the run.

        Raises:
            InvalidPatternError: If a pattern is malformed.
            NoMatchError: If nothing matched.
            SetupError: If a matched path could not be inspected.
        """
        directories = self.app.collect_directories(self.request.patterns)

        selected: list[Path] | None = None
        if self.request.filter_command is not None:
            filter_batch = self.app.start_filter(self.request, directories, token)
            self.progress_display.follow(filter_batch, 'Checking for changes with "git diff"...')
            _ = self.app.finish(filter_batch, token)
            if token.cancelled:
                logger.error("Interrupted while checking for changes")
                return Disposition.INTERRUPTED
            selected = self.app.changed_directories(filter_batch)

        batch = self.app.start_run(self.request, directories, token, selected=selected)
        self.progress_display.follow(
            batch,
            "Running command(s)...",
            on_result=self.result_display.show_operation,
        )
        summary = self.app.finish(batch, token)
        render_run_summary(self.result_display.console, batch.operations, summary)
        return summary.disposition(interrupted=token.cancelled)
