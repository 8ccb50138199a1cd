"""Command line argument options."""

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, final


@final
@dataclass(slots=True)
class RunArgs:
    """Resolved arguments for the ``run`` subcommand.

    Flag values have already been merged with the config file and the
    ``BTLR_*`` environment, so nothing downstream consults either again.
    """

    command: Literal["run"]
    patterns: list[str]
    exec_command: list[str]
    max_concurrency: int
    max_cmd_duration: float | None
    filter_command: list[str] | None
    interactive: bool
    verbose: bool
    quiet: bool
    log_file: Path | None = None
    config_file: Path | None = None


CLIArgs = RunArgs

__all__ = ["CLIArgs", "RunArgs"]
