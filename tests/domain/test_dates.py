from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from json_dedupe.domain.dates import (
    ISO_8601,
    UNIX_MILLISECONDS,
    UNIX_SECONDS,
    compare_dates,
    compare_instants,
    describe_format,
    format_timestamp,
    is_valid_date,
    parse_date,
)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("2014-05-07T17:30:20+00:00", datetime(2014, 5, 7, 17, 30, 20, tzinfo=UTC)),
        ("2014-05-07T17:30:20Z", datetime(2014, 5, 7, 17, 30, 20, tzinfo=UTC)),
        ("2014-05-07T19:30:20+02:00", datetime(2014, 5, 7, 17, 30, 20, tzinfo=UTC)),
        ("2014-05-07", datetime(2014, 5, 7, tzinfo=UTC)),
        ("1399483820", datetime(2014, 5, 7, 17, 30, 20, tzinfo=UTC)),
        ("1399483820000", datetime(2014, 5, 7, 17, 30, 20, tzinfo=UTC)),
        ("12/31/2020", datetime(2020, 12, 31, tzinfo=UTC)),
        ("31/12/2020", datetime(2020, 12, 31, tzinfo=UTC)),
        ("2020/12/31", datetime(2020, 12, 31, tzinfo=UTC)),
    ],
)
def test_parse_date_accepts_supported_layouts(text: str, expected: datetime) -> None:
    result = parse_date(text)

    assert result.is_valid
    assert result.value == expected
    assert result.value is not None
    assert result.value.tzinfo is not None


def test_parse_date_reports_detected_format() -> None:
    assert parse_date("2014-05-07T17:30:20Z").format == ISO_8601
    assert parse_date("1399483820").format == UNIX_SECONDS
    assert parse_date("1399483820000").format == UNIX_MILLISECONDS
    assert parse_date("12/31/2020").format == "%m/%d/%Y"


def test_parse_date_uses_fallback_formats_last() -> None:
    assert not parse_date("07.05.2014").is_valid

    result = parse_date("07.05.2014", fallback_formats=("%d.%m.%Y",))

    assert result.value == datetime(2014, 5, 7, tzinfo=UTC)
    assert result.format == "Custom: %d.%m.%Y"


@pytest.mark.parametrize("text", ["", "   ", None])
def test_parse_date_rejects_empty_values(text: str | None) -> None:
    result = parse_date(text)

    assert result.value is None
    assert result.error == "Empty date string"


def test_parse_date_reports_unparseable_value() -> None:
    result = parse_date("yesterday-ish")

    assert not result.is_valid
    assert result.error == "Unable to parse date: yesterday-ish"


def test_is_valid_date_and_describe_format() -> None:
    assert is_valid_date("2014-05-07")
    assert not is_valid_date("nope")
    assert describe_format("2014-05-07") == ISO_8601
    assert describe_format("nope") == "Unknown format"


def test_compare_dates_returns_none_when_incomparable() -> None:
    assert compare_dates("2014-05-07", "2014-05-08") == -1
    assert compare_dates("2014-05-08", "2014-05-07") == 1
    assert compare_dates("2014-05-07", "2014-05-07T00:00:00Z") == 0
    assert compare_dates("2014-05-07", "nope") is None


def test_compare_instants_treats_missing_side_as_equal() -> None:
    now = datetime(2024, 1, 1, tzinfo=UTC)

    assert compare_instants(now, None) == 0
    assert compare_instants(None, now) == 0
    assert compare_instants(now, now + timedelta(seconds=1)) == -1


def test_format_timestamp_uses_milliseconds_and_z_suffix() -> None:
    value = datetime(2024, 3, 1, 14, 30, 45, 123456, tzinfo=timezone(timedelta(hours=2)))

    assert format_timestamp(value) == "2024-03-01T12:30:45.123Z"
