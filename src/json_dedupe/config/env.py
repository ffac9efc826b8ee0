"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from pathlib import Path

from .errors import InvalidEnvironmentValueError

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def env_str(name: str, default: str) -> str:
    """Return a stripped environment value, falling back when absent or blank."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def env_flag(name: str, *, default: bool) -> bool:
    """Interpret an environment variable as a boolean switch."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise InvalidEnvironmentValueError(name, value, "a boolean such as true/false")


def env_path(name: str, default: Path) -> Path:
    """Return a directory path from the environment, expanded but not created."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return Path(value.strip()).expanduser()
