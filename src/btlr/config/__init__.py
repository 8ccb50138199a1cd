"""Configuration loading: TOML file, environment and duration parsing."""

from .config import Config
from .durations import format_duration, parse_duration
from .errors import ConfigError

__all__ = ["Config", "ConfigError", "format_duration", "parse_duration"]
