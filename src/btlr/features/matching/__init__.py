"""
Summary: Pattern matching feature exports for globstar resolution and directory reduction.
Why: Give callers one import path for turning patterns into target directories.
"""

from .directories import reduce_to_directories
from .errors import InvalidPatternError, MatchingError, NoMatchError, SetupError
from .globstar import collect_matches, rglob

__all__ = [
    "InvalidPatternError",
    "MatchingError",
    "NoMatchError",
    "SetupError",
    "collect_matches",
    "reduce_to_directories",
    "rglob",
]
