"""Configuration management for btlr."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Final

from btlr.platform.logging import logger

from .durations import parse_duration
from .errors import ConfigError
from .paths import CONFIG_ENV_VAR, default_config_path, resolve_overridable_path

ENV_PREFIX: Final[str] = "BTLR_"
_TRUE_VALUES: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES: Final[frozenset[str]] = frozenset({"0", "false", "no", "off"})


@dataclass(slots=True, frozen=True)
class Config:
    """Defaults for ``btlr run`` read from the config file and environment.

    Every field is optional; ``None`` means "use the built-in default".
    """

    # Number of directories processed at once
    max_concurrency: int | None = None

    # Seconds each command may run; 0 disables the limit
    max_cmd_duration: float | None = None

    # Arguments appended to "git diff --exit-code" to select changed directories
    git_diff: str | None = None

    # Force interactive progress output on or off
    interactive: bool | None = None

    # Rotating log file for debug output
    log_file: Path | None = None

    # File the values were read from, if any
    source: Path | None = None

    @classmethod
    def load(
        cls,
        path: Path | str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> Config:
        """Load configuration from file and environment.

        Args:
            path: Explicit config file; must exist when given.
            env: Environment mapping; defaults to ``os.environ``.

        Returns:
            Config: Values from the file overlaid with ``BTLR_*`` variables.

        Raises:
            ConfigError: If an explicit file is missing or any value is invalid.
        """
        mapping = os.environ if env is None else env
        config_file = resolve_overridable_path(
            explicit_path=path,
            env=mapping,
            env_var=CONFIG_ENV_VAR,
            default_factory=default_config_path,
        )
        explicit = path is not None or bool((mapping.get(CONFIG_ENV_VAR) or "").strip())

        values: dict[str, Any] = {}
        source: Path | None = None
        if config_file.is_file():
            values.update(_read_toml(config_file))
            source = config_file
        elif explicit:
            raise ConfigError(f"config file not found: {config_file}")

        values.update(_read_env(mapping))
        return cls.from_mapping(values, source=source)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any], source: Path | None = None) -> Config:
        """Build a validated ``Config`` from raw file or environment values."""

        known = {f.name for f in fields(cls)} - {"source"}
        for key in sorted(set(values) - known):
            logger.warning("Ignoring unknown configuration key '%s'", key)

        return cls(
            max_concurrency=_to_concurrency(values.get("max_concurrency")),
            max_cmd_duration=_to_duration(values.get("max_cmd_duration")),
            git_diff=_to_optional_str(values.get("git_diff")),
            interactive=_to_bool(values.get("interactive")),
            log_file=_to_path(values.get("log_file")),
            source=source,
        )


def _read_toml(config_file: Path) -> dict[str, Any]:
    try:
        with open(config_file, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"failed to read config file {config_file}: {e}") from e


def _read_env(env: Mapping[str, str]) -> dict[str, str]:
    values: dict[str, str] = {}
    for name in ("max_concurrency", "max_cmd_duration", "git_diff", "interactive", "log_file"):
        raw = env.get(ENV_PREFIX + name.upper())
        if raw is not None and raw.strip() != "":
            values[name] = raw.strip()
    return values


def _to_concurrency(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ConfigError(f"max_concurrency must be an integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"max_concurrency must be an integer, got {value!r}") from e
    if number < 1:
        raise ConfigError(f"max_concurrency must be positive, got {number}")
    return number


def _to_duration(value: Any) -> float | None:
    if value is None:
        return None
    if not isinstance(value, (str, int, float)):
        raise ConfigError(f"max_cmd_duration must be a duration, got {value!r}")
    return parse_duration(value)


def _to_optional_str(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"expected a string, got {value!r}")
    return value.strip() or None


def _to_bool(value: Any) -> bool | None:
    if value is None or isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigError(f"expected a boolean, got {value!r}")


def _to_path(value: Any) -> Path | None:
    if value is None:
        return None
    if not isinstance(value, (str, Path)):
        raise ConfigError(f"expected a path, got {value!r}")
    text = str(value).strip()
    return Path(text).expanduser() if text else None


__all__ = ["Config", "ConfigError", "ENV_PREFIX"]
