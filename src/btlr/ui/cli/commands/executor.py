"""src/btlr/ui/cli/commands/executor.py
What: Provide shared wiring for CLI command executors.
Why: Reuse orchestration and presentation helpers across commands.
"""

from abc import ABC, abstractmethod

from btlr.application.services.run_service import RunRequest, RunService
from btlr.features.execution import CancellationToken, Disposition
from btlr.ui.cli.args.options import RunArgs
from btlr.ui.cli.display.progress import ProgressDisplay
from btlr.ui.cli.display.result import ResultDisplay


class CommandExecutor(ABC):
    """Base class for command execution."""

    args: RunArgs
    app: RunService
    request: RunRequest
    progress_display: ProgressDisplay
    result_display: ResultDisplay

    def __init__(self, args: RunArgs, app: RunService | None = None) -> None:
        """Initialize command executor.

        Args:
            args: Command line arguments.
            app: Application service; a default one is built when omitted.
        """
        self.args = args
        self.app = app or RunService()
        self.request = RunRequest(
            patterns=tuple(args.patterns),
            command=tuple(args.exec_command),
            max_concurrency=args.max_concurrency,
            max_duration=args.max_cmd_duration,
            filter_command=tuple(args.filter_command) if args.filter_command else None,
        )
        self.progress_display = ProgressDisplay(enabled=args.interactive)
        self.result_display = ResultDisplay()

    @abstractmethod
    def execute(self, token: CancellationToken) -> Disposition:
        """Execute the command.

        Args:
            token: Cancelled when the user interrupts the run.

        Returns:
            Overall outcome used to pick the exit code.
        """
        pass
