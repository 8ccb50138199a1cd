"""Command line interface for btlr."""

import sys
from typing import final

from btlr.config import ConfigError
from btlr.features.execution import CancellationToken, Disposition
from btlr.features.matching import InvalidPatternError, NoMatchError, SetupError
from btlr.platform.logging import logger
from btlr.ui.cli.args import ArgumentParser
from btlr.ui.cli.args.options import CLIArgs
from btlr.ui.cli.commands import RunCommand
from btlr.ui.cli.models import ExitCode
from btlr.ui.cli.signals import cancel_on_signals

_DISPOSITION_CODES: dict[Disposition, ExitCode] = {
    Disposition.SUCCESS: ExitCode.SUCCESS,
    Disposition.FAILURE: ExitCode.FAILED_CMD,
    Disposition.INTERRUPTED: ExitCode.INTERRUPTED,
}


@final
class CommandProcessor:
    """Command line interface processor."""

    @staticmethod
    def process_command(args_list: list[str] | None = None) -> int:
        """Process command line arguments.

        Args:
            args_list: List of command line arguments (for testing).

        Returns:
            int: Process exit code.
        """
        token = CancellationToken()
        try:
            args: CLIArgs = ArgumentParser.process_args(args_list)
            with cancel_on_signals(token):
                disposition = RunCommand(args).execute(token)
            return _DISPOSITION_CODES[disposition]

        except (InvalidPatternError, NoMatchError, ConfigError) as e:
            logger.error("%s", e)
            return ExitCode.MISUSE
        except SetupError as e:
            logger.error("%s", e)
            return ExitCode.FAILED_CMD
        except KeyboardInterrupt:
            logger.info("\nOperation cancelled by user")
            return ExitCode.INTERRUPTED
        except Exception as e:
            logger.error("An unexpected error occurred: %s", str(e))
            return ExitCode.UNEXPECTED


def main() -> int:
    """Main entry point.

    Returns:
        int: Process exit code; parser errors exit directly via ``sys.exit``.
    """
    return CommandProcessor.process_command()


if __name__ == "__main__":
    sys.exit(main())
