"""Parse lead JSON documents from files, strings or stdin into records."""

from __future__ import annotations

import json
import sys
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final

from pydantic import ValidationError

from json_dedupe.domain.model import DEFAULT_RECENCY_FIELD, EMAIL_FIELD, ID_FIELD, LeadRecord

from .errors import InputFileError, RecordParseError
from .schema import LeadPayload, LeadsDocument

if TYPE_CHECKING:
    from collections.abc import Sequence
    from typing import TextIO

STDIN_SOURCE: Final[str] = "-"

log = getLogger(__name__)


def parse_content(content: str, *, recency_key: str = DEFAULT_RECENCY_FIELD) -> list[LeadRecord]:
    """Parse a ``{"leads": [...]}`` document held in ``content``."""

    if recency_key in (ID_FIELD, EMAIL_FIELD):
        raise RecordParseError(f"Recency key cannot be a uniqueness key: {recency_key}")
    if not content or not content.strip():
        raise RecordParseError("Empty or invalid JSON content")

    try:
        data: Any = json.loads(content)
    except json.JSONDecodeError as exc:
        raise RecordParseError(f"Invalid JSON format: {exc}") from exc

    if not isinstance(data, dict):
        raise RecordParseError("JSON content must be an object")
    if "leads" not in data:
        raise RecordParseError('JSON must contain a "leads" array')

    try:
        document = LeadsDocument.model_validate(data)
    except ValidationError as exc:
        raise RecordParseError('"leads" field must be an array') from exc

    records: list[LeadRecord] = []
    errors: list[str] = []
    for index, raw in enumerate(document.leads):
        if not isinstance(raw, dict):
            errors.append(f"Record at index {index}: must be an object")
            continue
        try:
            records.append(_to_record(LeadPayload.model_validate(raw), recency_key=recency_key))
        except ValidationError as exc:
            errors.extend(f"Record at index {index}: {message}" for message in _messages(exc))
        except ValueError as exc:
            errors.append(f"Record at index {index}: {exc}")

    if errors:
        raise RecordParseError("Failed to parse some records:", errors=errors)
    return records


def parse_file(path: Path | str, *, recency_key: str = DEFAULT_RECENCY_FIELD) -> list[LeadRecord]:
    file_path = Path(path)
    try:
        content = file_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise InputFileError(file_path, "File not found") from exc
    except PermissionError as exc:
        raise InputFileError(file_path, "Permission denied") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise InputFileError(file_path, f"Error reading file ({exc})") from exc
    return parse_content(content, recency_key=recency_key)


def parse_stdin(
    stream: TextIO | None = None,
    *,
    recency_key: str = DEFAULT_RECENCY_FIELD,
) -> list[LeadRecord]:
    source = stream if stream is not None else sys.stdin
    return parse_content(source.read(), recency_key=recency_key)


def parse_inputs(
    sources: Sequence[str],
    *,
    recency_key: str = DEFAULT_RECENCY_FIELD,
    stdin: TextIO | None = None,
) -> list[LeadRecord]:
    """Parse every source in order and concatenate their records (``-`` is stdin)."""

    records: list[LeadRecord] = []
    for source in sources:
        if source == STDIN_SOURCE:
            parsed = parse_stdin(stdin, recency_key=recency_key)
        else:
            parsed = parse_file(source, recency_key=recency_key)
        log.debug(
            "Parsed %s records from %s",
            len(parsed),
            "stdin" if source == STDIN_SOURCE else source,
        )
        records.extend(parsed)
    return records


def is_readable_file(path: Path | str) -> bool:
    file_path = Path(path)
    try:
        with file_path.open("rb"):
            return True
    except OSError:
        return False


def file_size(path: Path | str) -> int:
    file_path = Path(path)
    try:
        return file_path.stat().st_size
    except OSError as exc:
        raise InputFileError(file_path, "Cannot access file") from exc


def _to_record(payload: LeadPayload, *, recency_key: str) -> LeadRecord:
    attributes = payload.extras
    if recency_key not in attributes:
        raise ValueError(f"{recency_key}: Field required")
    recency = attributes.pop(recency_key)
    if not isinstance(recency, str):
        raise ValueError(f"{recency_key}: Input should be a valid string")  # noqa: TRY004
    return LeadRecord(
        record_id=payload.record_id,
        email=payload.email,
        entry_date=recency,
        attributes=attributes,
        recency_key=recency_key,
    )


def _messages(exc: ValidationError) -> list[str]:
    messages: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return messages
