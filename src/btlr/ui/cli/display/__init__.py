"""Display management for CLI interface."""

from btlr.ui.cli.display.progress import ProgressDisplay
from btlr.ui.cli.display.result import ResultDisplay
from btlr.ui.cli.display.summary import render_run_summary

__all__ = ["ProgressDisplay", "ResultDisplay", "render_run_summary"]
