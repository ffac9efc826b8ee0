"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when configuration values are invalid."""


class InvalidEnvironmentValueError(ConfigurationError):
    """Raised when an environment variable holds a value we cannot interpret."""

    def __init__(self, name: str, value: str, expected: str) -> None:
        self.name = name
        self.value = value
        super().__init__(f"Invalid value for {name}: {value!r} (expected {expected})")
