"""Errors raised while reading or writing JSON lead documents."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path


class JsonDedupeInputError(ValueError):
    """Base class for problems with the input documents."""


class InputFileError(JsonDedupeInputError):
    """Raised when an input file cannot be opened or read."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{reason}: {path}")


class RecordParseError(JsonDedupeInputError):
    """Raised when a document is not valid JSON or contains malformed records."""

    def __init__(self, message: str, *, errors: Sequence[str] = ()) -> None:
        self.errors = tuple(errors)
        detail = "\n".join(self.errors)
        super().__init__(f"{message}\n{detail}" if detail else message)


class InvalidOutputFilenameError(ValueError):
    """Raised when a requested output filename is not acceptable."""


class OutputWriteError(OSError):
    """Raised when an output or log file cannot be written."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Error writing {path}: {reason}")
