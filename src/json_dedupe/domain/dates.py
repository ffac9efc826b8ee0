"""Flexible parsing of recency values found in lead records.

Inputs come from several upstream systems, so besides ISO-8601 we accept Unix
timestamps (seconds or milliseconds) and a handful of common day/month
layouts. Every parsed value is timezone-aware; naive inputs are taken as UTC
so that values from different sources can always be compared.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence

ISO_8601: Final[str] = "ISO 8601"
UNIX_SECONDS: Final[str] = "Unix timestamp (seconds)"
UNIX_MILLISECONDS: Final[str] = "Unix timestamp (milliseconds)"

COMMON_FORMATS: Final[tuple[str, ...]] = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%Y/%m/%d",
    "%m-%d-%Y",
    "%d-%m-%Y",
)

_UNIX_SECONDS_RE = re.compile(r"\d{10}")
_UNIX_MILLISECONDS_RE = re.compile(r"\d{13}")


class Clock(Protocol):
    def __call__(self) -> datetime: ...


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class DateParseResult:
    """Outcome of :func:`parse_date`, including the detected layout."""

    value: datetime | None
    format: str | None = None
    error: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.value is not None


def parse_date(text: str | None, *, fallback_formats: Sequence[str] = ()) -> DateParseResult:
    """Parse ``text`` trying ISO-8601, Unix timestamps, common and fallback layouts."""

    if text is None or not text.strip():
        return DateParseResult(value=None, error="Empty date string")

    candidate = text.strip()

    if _UNIX_SECONDS_RE.fullmatch(candidate):
        return _from_epoch(int(candidate), UNIX_SECONDS)
    if _UNIX_MILLISECONDS_RE.fullmatch(candidate):
        return _from_epoch(int(candidate) / 1000, UNIX_MILLISECONDS)

    try:
        return DateParseResult(value=_as_utc(datetime.fromisoformat(candidate)), format=ISO_8601)
    except ValueError:
        pass

    for layout in COMMON_FORMATS:
        parsed = _strptime(candidate, layout)
        if parsed is not None:
            return DateParseResult(value=parsed, format=layout)

    for layout in fallback_formats:
        parsed = _strptime(candidate, layout)
        if parsed is not None:
            return DateParseResult(value=parsed, format=f"Custom: {layout}")

    return DateParseResult(value=None, error=f"Unable to parse date: {candidate}")


def parse_recency(text: str | None) -> datetime | None:
    """Return the parsed instant for ``text`` or ``None`` when it cannot be parsed."""

    return parse_date(text).value


def is_valid_date(text: str | None, *, fallback_formats: Sequence[str] = ()) -> bool:
    return parse_date(text, fallback_formats=fallback_formats).is_valid


def describe_format(text: str | None) -> str:
    result = parse_date(text)
    if result.is_valid and result.format:
        return result.format
    return "Unknown format"


def compare_dates(left: str | None, right: str | None) -> int | None:
    """Three-way compare two date strings; ``None`` if either cannot be parsed."""

    left_value = parse_recency(left)
    right_value = parse_recency(right)
    if left_value is None or right_value is None:
        return None
    return _three_way(left_value, right_value)


def compare_instants(left: datetime | None, right: datetime | None) -> int:
    """Three-way compare where an unparseable side makes the pair incomparable (0)."""

    if left is None or right is None:
        return 0
    return _three_way(left, right)


def format_timestamp(value: datetime) -> str:
    """Render ``value`` as ISO-8601 UTC with millisecond precision and ``Z`` suffix."""

    rendered = value.astimezone(UTC).isoformat(timespec="milliseconds")
    return rendered.replace("+00:00", "Z")


def _three_way(left: datetime, right: datetime) -> int:
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


def _from_epoch(seconds: float, layout: str) -> DateParseResult:
    try:
        value = datetime.fromtimestamp(seconds, tz=UTC)
    except (OverflowError, OSError, ValueError) as exc:
        return DateParseResult(value=None, error=f"Unable to parse date: {exc}")
    return DateParseResult(value=value, format=layout)


def _strptime(candidate: str, layout: str) -> datetime | None:
    try:
        return _as_utc(datetime.strptime(candidate, layout))  # noqa: DTZ007
    except ValueError:
        return None


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
