"""src/btlr/features/matching/directories.py
What: Reduce matched paths to the unique directories a command runs in.
Why: A directory holding several matching files must only be targeted once.
"""

from __future__ import annotations

import os
import stat
from collections.abc import Iterable
from pathlib import Path

from .errors import SetupError


def reduce_to_directories(matches: Iterable[str]) -> list[Path]:
    """Return the unique directories for ``matches`` in first-seen order.

    A match that is itself a directory is kept as-is; a file contributes its
    containing directory.

    Raises:
        SetupError: If a match can no longer be inspected (e.g. it was removed).
    """

    directories: list[Path] = []
    seen: set[str] = set()
    for match in matches:
        try:
            mode = os.stat(match).st_mode
        except OSError as exc:
            raise SetupError(match, exc) from exc

        directory = match if stat.S_ISDIR(mode) else os.path.dirname(match)
        key = os.path.normpath(directory or os.curdir)
        if key in seen:
            continue
        seen.add(key)
        directories.append(Path(key))
    return directories


__all__ = ["reduce_to_directories"]
