"""Command line interface package."""

from btlr.ui.cli.cli import CommandProcessor, main

__all__ = ["CommandProcessor", "main"]
