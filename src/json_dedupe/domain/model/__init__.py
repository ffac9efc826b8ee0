"""Public domain model surface."""

from __future__ import annotations

from json_dedupe.domain.model.enums import ConflictKind, MergeReason
from json_dedupe.domain.model.record import (
    DEFAULT_RECENCY_FIELD,
    EMAIL_FIELD,
    ID_FIELD,
    LeadRecord,
)

__all__ = [
    "DEFAULT_RECENCY_FIELD",
    "EMAIL_FIELD",
    "ID_FIELD",
    "ConflictKind",
    "LeadRecord",
    "MergeReason",
]
