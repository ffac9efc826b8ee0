"""Deterministic clock for change-log and filename timestamps."""

from __future__ import annotations

from datetime import UTC, datetime

FIXED_NOW = datetime(2024, 3, 1, 12, 30, 45, 123000, tzinfo=UTC)


def fixed_clock() -> datetime:
    return FIXED_NOW
