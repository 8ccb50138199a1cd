"""Command execution package for CLI."""

from btlr.ui.cli.commands.executor import CommandExecutor
from btlr.ui.cli.commands.run import RunCommand

__all__ = ["CommandExecutor", "RunCommand"]
