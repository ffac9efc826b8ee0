"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ConflictKind(StrEnum):
    """Which uniqueness key a group or resolution component collided on."""

    ID = "id_conflict"
    EMAIL = "email_conflict"
    CROSS = "cross_conflict"


class MergeReason(StrEnum):
    """Why the kept record won over a dropped one."""

    NEWER_DATE = "newer_date"
    LAST_IN_LIST = "last_in_list"
