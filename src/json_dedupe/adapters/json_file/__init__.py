"""JSON file adapter for lead documents."""

from __future__ import annotations

from .errors import (
    InputFileError,
    InvalidOutputFilenameError,
    JsonDedupeInputError,
    OutputWriteError,
    RecordParseError,
)
from .output import OutputManager, OutputResult, format_file_size, validate_output_filename
from .parser import (
    STDIN_SOURCE,
    file_size,
    is_readable_file,
    parse_content,
    parse_file,
    parse_inputs,
    parse_stdin,
)
from .schema import LeadPayload, LeadsDocument

__all__ = [
    "STDIN_SOURCE",
    "InputFileError",
    "InvalidOutputFilenameError",
    "JsonDedupeInputError",
    "LeadPayload",
    "LeadsDocument",
    "OutputManager",
    "OutputResult",
    "OutputWriteError",
    "RecordParseError",
    "file_size",
    "format_file_size",
    "is_readable_file",
    "parse_content",
    "parse_file",
    "parse_inputs",
    "parse_stdin",
    "validate_output_filename",
]
