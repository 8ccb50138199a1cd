"""Configuration errors."""

from __future__ import annotations


class ConfigError(ValueError):
    """Raised when configuration values or files are invalid."""


__all__ = ["ConfigError"]
