"""Command line argument handling package."""

from btlr.ui.cli.args.parser import ArgumentParser
from btlr.ui.cli.args.options import CLIArgs, RunArgs

__all__ = ["ArgumentParser", "CLIArgs", "RunArgs"]
