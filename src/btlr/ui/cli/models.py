"""src/btlr/ui/cli/models.py
What: Shared CLI value objects such as process exit codes.
Why: Let the parser and the command processor agree without import cycles.
"""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes returned by ``btlr``."""

    SUCCESS = 0
    UNEXPECTED = 1
    FAILED_CMD = 2
    MISUSE = 50
    INTERRUPTED = 130


__all__ = ["ExitCode"]
