"""Shared path utilities for configuration locations.

Policy:
- Config: ``$BTLR_CONFIG`` when set, else ``~/.btlr.toml``.
- An explicit ``--config`` path always wins over both.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Callable, Final

CONFIG_ENV_VAR: Final[str] = "BTLR_CONFIG"
CONFIG_FILE_NAME: Final[str] = ".btlr.toml"


def resolve_overridable_path(
    *,
    explicit_path: Path | str | None,
    env: Mapping[str, str] | None,
    env_var: str | None,
    default_factory: Callable[[], Path],
) -> Path:
    """Resolve a configuration path honoring explicit and environment overrides."""

    if explicit_path is not None:
        return Path(explicit_path).expanduser().resolve()

    mapping = env if env is not None else os.environ
    if env_var:
        candidate = (mapping.get(env_var) or "").strip()
        if candidate:
            return Path(candidate).expanduser().resolve()

    return default_factory().expanduser().resolve()


def default_config_path() -> Path:
    """Get the default path to the TOML config file (``~/.btlr.toml``)."""

    return Path.home() / CONFIG_FILE_NAME


__all__ = [
    "CONFIG_ENV_VAR",
    "CONFIG_FILE_NAME",
    "default_config_path",
    "resolve_overridable_path",
]
