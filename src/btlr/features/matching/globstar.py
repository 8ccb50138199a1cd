"""Recursive glob matching with globstar support.

Where: src/btlr/features/matching/globstar.py
What: Resolve glob patterns, including ``**`` segments, into ordered unique paths.
Why: ``glob.glob`` treats ``**`` as ``*`` unless recursive, and never sorts its output.
"""

from __future__ import annotations

import glob
import os
import re
from collections.abc import Iterable, Iterator
from typing import Final

from btlr.platform.logging import logger

from .errors import InvalidPatternError

GLOBSTAR: Final[str] = "**"

_SEPARATOR_CHARS: Final[str] = re.escape(os.sep) + (re.escape(os.altsep) if os.altsep else "")
_SEPARATOR_RE: Final[re.Pattern[str]] = re.compile(f"[{_SEPARATOR_CHARS}]")
_MAGIC_RE: Final[re.Pattern[str]] = re.compile(r"[*?[]")


def split_segments(pattern: str) -> list[str]:
    """Split ``pattern`` on the platform path separators."""

    return _SEPARATOR_RE.split(pattern)


def has_magic(pattern: str) -> bool:
    """Return whether ``pattern`` contains shell-style wildcard characters."""

    return _MAGIC_RE.search(pattern) is not None


def validate_pattern(pattern: str) -> None:
    """Reject malformed bracket expressions in any segment of ``pattern``.

    Raises:
        InvalidPatternError: On an unterminated ``[`` or a reversed range.
    """

    for segment in split_segments(pattern):
        _validate_segment(pattern, segment)


def _validate_segment(pattern: str, segment: str) -> None:
    index = 0
    length = len(segment)
    while index < length:
        if segment[index] != "[":
            index += 1
            continue

        start = index + 1
        if start < length and segment[start] == "!":
            start += 1
        # A ']' directly after the opening bracket is a class member.
        if start < length and segment[start] == "]":
            start += 1
        close = segment.find("]", start)
        if close == -1:
            raise InvalidPatternError(pattern, "unterminated character class")

        _validate_ranges(pattern, segment[index + 1 : close])
        index = close + 1


def _validate_ranges(pattern: str, body: str) -> None:
    members = body[1:] if body.startswith("!") else body
    position = 0
    while position < len(members):
        if position + 2 < len(members) and members[position + 1] == "-":
            low, high = members[position], members[position + 2]
            if low > high:
                raise InvalidPatternError(pattern, f"invalid character range {low}-{high}")
            position += 3
            continue
        position += 1


def _sort_key(path: str) -> list[str]:
    return split_segments(path)


def shallow_glob(pattern: str) -> list[str]:
    """Match ``pattern`` one directory level at a time, sorted per level.

    Hidden entries are matched by ``*`` and ``?``. Matches are normalized
    and a pattern that matches nothing yields an empty list.
    """

    if not pattern:
        return []
    found = (os.path.normpath(path) for path in glob.glob(pattern, include_hidden=True))
    return sorted(dict.fromkeys(found), key=_sort_key)


def walk_directories(root: str) -> Iterator[str]:
    """Yield ``root`` and every directory beneath it in lexicographic pre-order.

    Directories that cannot be listed are skipped rather than aborting the
    walk. Symbolic links below ``root`` are not followed.
    """

    if not os.path.isdir(root):
        return

    stack = [root]
    while stack:
        current = stack.pop()
        yield current
        try:
            with os.scandir(current) as entries:
                children = sorted(entry.name for entry in entries if _is_real_directory(entry))
        except OSError as exc:
            logger.debug("Skipping unreadable directory %s: %s", current, exc)
            continue
        stack.extend(os.path.join(current, name) for name in reversed(children))


def _is_real_directory(entry: os.DirEntry[str]) -> bool:
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError:
        return False


def _walk_roots(prefix: str) -> list[str]:
    if not has_magic(prefix):
        return [prefix]
    return [candidate for candidate in shallow_glob(prefix) if os.path.isdir(candidate)]


def rglob(pattern: str) -> list[str]:
    """Return the paths matching ``pattern``, with support for globstars.

    A segment that is exactly ``**`` matches zero or more directory levels.
    Only the first globstar is expanded here; any later ones are expanded by
    the recursive call made for every visited directory, so
    ``a/**/b/**/*.txt`` works as expected. A trailing globstar matches every
    entry at any depth below the prefix.

    Args:
        pattern: Glob pattern using the platform path separator.

    Returns:
        Normalized matching paths without duplicates, in walk order.

    Raises:
        InvalidPatternError: If the pattern holds a malformed bracket expression.
    """

    validate_pattern(pattern)
    segments = split_segments(pattern)
    try:
        index = segments.index(GLOBSTAR)
    except ValueError:
        return shallow_glob(pattern)

    prefix = os.path.normpath(os.path.join("", *segments[:index]))
    if os.path.isabs(pattern) and not os.path.isabs(prefix):
        prefix = os.path.normpath(os.path.join(os.sep, prefix))
    suffix = os.path.join("", *segments[index + 1 :]) if index < len(segments) - 1 else "*"

    matches: dict[str, None] = {}
    for root in _walk_roots(prefix):
        for directory in walk_directories(root):
            nested = os.path.normpath(os.path.join(glob.escape(directory), suffix))
            for match in rglob(nested):
                _ = matches.setdefault(os.path.normpath(match), None)
    return list(matches)


def collect_matches(patterns: Iterable[str]) -> list[str]:
    """Concatenate the matches of every pattern, preserving pattern order."""

    matches: list[str] = []
    for pattern in patterns:
        found = rglob(pattern)
        logger.debug("Pattern %r matched %d path(s)", pattern, len(found))
        matches.extend(found)
    return matches


__all__ = [
    "GLOBSTAR",
    "collect_matches",
    "has_magic",
    "rglob",
    "shallow_glob",
    "split_segments",
    "validate_pattern",
    "walk_directories",
]
