"""Application configuration helpers."""

from __future__ import annotations

from .dedupe import DEFAULT_TIMESTAMP_KEY, DedupeConfig, get_dedupe_config
from .errors import ConfigurationError, InvalidEnvironmentValueError
from .logging import configure_logging, level_for

__all__ = [
    "DEFAULT_TIMESTAMP_KEY",
    "ConfigurationError",
    "DedupeConfig",
    "InvalidEnvironmentValueError",
    "configure_logging",
    "get_dedupe_config",
    "level_for",
]
