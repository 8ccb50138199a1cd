"""src/btlr/features/matching/errors.py
What: Exceptions raised while turning patterns into target directories.
Why: Let the CLI distinguish misuse from filesystem setup failures.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class MatchingError(Exception):
    """Base class for failures that abort a run before any command starts."""


class InvalidPatternError(MatchingError, ValueError):
    """Raised when a glob pattern is syntactically malformed."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"syntax error in pattern {pattern!r}: {reason}")
        self.pattern: str = pattern
        self.reason: str = reason


class NoMatchError(MatchingError):
    """Raised when none of the supplied patterns matched a path."""

    def __init__(self, patterns: Sequence[str]) -> None:
        joined = " ".join(patterns)
        super().__init__(f"no paths match pattern(s): '{joined}'")
        self.patterns: tuple[str, ...] = tuple(patterns)


class SetupError(MatchingError):
    """Raised when a matched path cannot be inspected while collecting directories."""

    def __init__(self, path: Path | str, cause: OSError) -> None:
        super().__init__(f"error determining paths: '{cause}'")
        self.path: Path = Path(path)
        self.cause: OSError = cause


__all__ = ["MatchingError", "InvalidPatternError", "NoMatchError", "SetupError"]
