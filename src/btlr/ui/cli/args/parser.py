"""Command line argument parser."""

import argparse
import logging
import os
import shlex
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import NoReturn, final, override

from btlr.application.services.run_service import git_diff_filter
from btlr.config import Config, ConfigError, parse_duration
from btlr.platform.logging import logger, setup_logger
from btlr.ui.cli.args.options import CLIArgs, RunArgs
from btlr.ui.cli.models import ExitCode

COMMAND_SEPARATOR = "--"

_RUN_DESCRIPTION = """\
Runs a command in parallel, targeting multiple directories concurrently.

  btlr run "PATTERN" [PATTERN ...] -- COMMAND

PATTERN is a glob-style pattern with bash-style globstar ("**") support.
Every folder matching a pattern, or containing a file that matches it, has
COMMAND executed with that folder as its working directory. Output from
each command and a summary of all commands are printed as they complete.
Without "--", only the first argument is treated as a pattern."""


class _MisuseParser(argparse.ArgumentParser):
    """``argparse`` parser that exits with the misuse code on bad usage."""

    @override
    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(ExitCode.MISUSE, f"{self.prog}: error: {message}\n")


def _duration(value: str) -> float:
    try:
        return parse_duration(value)
    except ConfigError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from e
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be positive, got {number}")
    return number


@final
class ArgumentParser:
    """Command line argument parser."""

    @staticmethod
    def create_parser() -> argparse.ArgumentParser:
        """Create argument parser.

        Returns:
            argparse.ArgumentParser: Configured argument parser.
        """
        parser = _MisuseParser(
            prog="btlr",
            description="btlr is a cli to make it easy to execute commands reproducibly.",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        _ = parser.add_argument(
            "--config",
            type=str,
            help="Config file (default: $BTLR_CONFIG, then ~/.btlr.toml)",
            metavar="FILE",
        )

        subparsers = parser.add_subparsers(dest="command", required=True)
        run_parser = subparsers.add_parser(
            "run",
            help="Run a command in every directory that matches the given patterns",
            description=_RUN_DESCRIPTION,
            usage="%(prog)s [options] PATTERN [PATTERN ...] -- COMMAND [ARG ...]",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        ArgumentParser._configure_run_parser(run_parser)
        return parser

    @staticmethod
    def split_command(args: Sequence[str]) -> tuple[list[str], list[str] | None]:
        """Split raw arguments at the first ``--``.

        Returns:
            The arguments for ``argparse`` and the command tokens, or ``None``
            for the command when no separator was given.
        """
        argv = list(args)
        if COMMAND_SEPARATOR not in argv:
            return argv, None
        index = argv.index(COMMAND_SEPARATOR)
        return argv[:index], argv[index + 1 :]

    @staticmethod
    def process_args(args: Sequence[str] | None = None) -> CLIArgs:
        """Process command line arguments.

        Args:
            args: Command line arguments. If None, uses sys.argv[1:].

        Returns:
            CLIArgs: Arguments merged with the config file and environment.
        """
        argv = list(sys.argv[1:] if args is None else args)
        head, dashed_command = ArgumentParser.split_command(argv)
        parsed_args = ArgumentParser.create_parser().parse_args(head)

        if parsed_args.command != "run":
            logger.error("Unsupported command: %s", parsed_args.command)
            sys.exit(ExitCode.MISUSE)

        if parsed_args.verbose:
            console_level = logging.DEBUG
        elif parsed_args.quiet:
            console_level = logging.ERROR
        else:
            console_level = logging.INFO

        try:
            config = Config.load(parsed_args.config)
        except ConfigError as e:
            _ = setup_logger(console_level=console_level)
            logger.error("Invalid configuration: %s", e)
            sys.exit(ExitCode.MISUSE)

        log_file = Path(parsed_args.log_file).expanduser() if parsed_args.log_file else config.log_file
        _ = setup_logger(log_file=log_file, console_level=console_level)
        if config.source is not None:
            logger.info("Using config file: %s", config.source)

        return ArgumentParser._process_run(parsed_args, dashed_command, config, log_file)

    @staticmethod
    def _configure_run_parser(parser: argparse.ArgumentParser) -> None:
        _ = parser.add_argument(
            "patterns",
            nargs="+",
            help="Glob patterns selecting target directories",
            metavar="PATTERN",
        )
        _ = parser.add_argument(
            "--git-diff",
            type=str,
            help='Only run in directories where changes are detected via "git diff ARGS"',
            metavar="ARGS",
        )
        _ = parser.add_argument(
            "--interactive",
            action=argparse.BooleanOptionalAction,
            default=None,
            help="Show live progress (default: whether stdout is a terminal)",
        )
        _ = parser.add_argument(
            "--max-concurrency",
            type=_positive_int,
            help="Number of directories processed at once (default: CPU count)",
            metavar="N",
        )
        _ = parser.add_argument(
            "--max-cmd-duration",
            type=_duration,
            help="Kill each command after this long, e.g. 30s or 1m30s (default: unlimited)",
            metavar="DURATION",
        )
        _ = parser.add_argument(
            "--log-file",
            type=str,
            help="Write debug logs to a rotating log file",
            metavar="PATH",
        )
        verbosity = parser.add_mutually_exclusive_group()
        _ = verbosity.add_argument(
            "--verbose",
            action="store_true",
            help="Log every started and finished command",
        )
        _ = verbosity.add_argument(
            "--quiet",
            action="store_true",
            help="Suppress all log output except errors",
        )

    @staticmethod
    def _process_run(
        parsed_args: argparse.Namespace,
        dashed_command: list[str] | None,
        config: Config,
        log_file: Path | None,
    ) -> RunArgs:
        patterns: list[str] = list(parsed_args.patterns)
        if dashed_command is None:
            # Without a separator only the first argument is a pattern.
            patterns, command_tokens = patterns[:1], patterns[1:]
        else:
            command_tokens = dashed_command

        try:
            exec_command = shlex.split(" ".join(command_tokens))
        except ValueError as e:
            logger.error("Invalid command %r: %s", " ".join(command_tokens), e)
            sys.exit(ExitCode.MISUSE)
        if not exec_command:
            logger.error("No command given; use: btlr run PATTERN -- COMMAND")
            sys.exit(ExitCode.MISUSE)

        git_diff = parsed_args.git_diff if parsed_args.git_diff is not None else config.git_diff
        filter_command: list[str] | None = None
        if git_diff:
            try:
                filter_command = list(git_diff_filter(git_diff))
            except ValueError as e:
                logger.error("Invalid --git-diff arguments %r: %s", git_diff, e)
                sys.exit(ExitCode.MISUSE)

        max_cmd_duration = (
            parsed_args.max_cmd_duration
            if parsed_args.max_cmd_duration is not None
            else config.max_cmd_duration
        )
        interactive = parsed_args.interactive
        if interactive is None:
            interactive = config.interactive if config.interactive is not None else sys.stdout.isatty()

        return RunArgs(
            command="run",
            patterns=patterns,
            exec_command=exec_command,
            max_concurrency=parsed_args.max_concurrency or config.max_concurrency or os.cpu_count() or 1,
            max_cmd_duration=max_cmd_duration or None,
            filter_command=filter_command,
            interactive=interactive,
            verbose=parsed_args.verbose,
            quiet=parsed_args.quiet,
            log_file=log_file,
            config_file=config.source,
        )
