"""Result display functionality for CLI."""

from typing import Final, final

from rich.console import Console

from btlr.features.execution import Operation, StatusType

CANCELLED_MESSAGE: Final[str] = "not started: interrupted before complete (sigint or sigterm)"


@final
class ResultDisplay:
    """Prints the output block of each finished operation to stdout."""

    def __init__(self, console: Console | None = None) -> None:
        self.console: Console = console or Console(highlight=False, soft_wrap=True, emoji=False)

    def show_operation(self, operation: Operation) -> None:
        """Print the header, combined output and error of one settled operation.

        Skipped operations print nothing.
        """
        if operation.cancelled():
            self._write_header(operation)
            self._write(f"err: {CANCELLED_MESSAGE}")
            self._write("")
            return

        result = operation.result()
        if result.status is StatusType.SKIPPED:
            return

        self._write_header(operation)
        self._write(result.combined_text.rstrip("\n"))
        if result.error:
            self._write(f"\nerr: {result.error}")
        self._write("")

    def _write_header(self, operation: Operation) -> None:
        self._write(f"\n#\n# {operation.directory}\n#\n")

    def _write(self, text: str) -> None:
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)
