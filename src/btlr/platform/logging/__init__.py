"""Logging facade exports.

Where: platform/logging/__init__.py
What: Re-export the configured logger, setup helpers, and the Rich handler.
Why: Provide a single canonical import path for every layer.
"""

from __future__ import annotations

from .config import LOGGER_NAME, console_of, logger, setup_logger
from .handlers import RunEventRichHandler

__all__ = [
    "LOGGER_NAME",
    "RunEventRichHandler",
    "console_of",
    "logger",
    "setup_logger",
]
