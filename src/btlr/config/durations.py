"""src/btlr/config/durations.py
What: Parse and format command durations such as ``1m30s`` or ``500ms``.
Why: Accept the same duration syntax for flags, env vars and the config file.
"""

from __future__ import annotations

import math
import re
from typing import Final

from .errors import ConfigError

_UNIT_SECONDS: Final[dict[str, float]] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_COMPONENT_RE: Final[re.Pattern[str]] = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(value: str | int | float) -> float:
    """Convert ``value`` to seconds.

    Numbers, and strings holding a bare number, are taken as seconds. Other
    strings are a sequence of ``<number><unit>`` components with units
    ``ns``, ``us``, ``ms``, ``s``, ``m`` and ``h``.

    Raises:
        ConfigError: If the value is malformed or negative.
    """

    if isinstance(value, bool):
        raise ConfigError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        seconds = _parse_text(value)
    if not math.isfinite(seconds):
        raise ConfigError(f"invalid duration: {value!r}")
    if seconds < 0:
        raise ConfigError(f"duration must not be negative: {value!r}")
    return seconds


def _parse_text(value: str) -> float:
    text = value.strip()
    try:
        return float(text)
    except ValueError:
        pass

    sign = 1.0
    if text[:1] in {"+", "-"}:
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]

    total = 0.0
    position = 0
    for match in _COMPONENT_RE.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()
    if position == 0 or position != len(text):
        raise ConfigError(f"invalid duration: {value!r}")
    return sign * total


def format_duration(seconds: float) -> str:
    """Render ``seconds`` compactly, e.g. ``90`` -> ``1m30s``."""

    if seconds < 60:
        return f"{seconds:g}s"
    minutes, remainder = divmod(seconds, 60)
    hours, minutes = divmod(int(minutes), 60)
    rendered = f"{hours}h" if hours else ""
    if minutes or hours:
        rendered += f"{minutes}m"
    if remainder:
        rendered += f"{remainder:g}s"
    return rendered


__all__ = ["format_duration", "parse_duration"]
