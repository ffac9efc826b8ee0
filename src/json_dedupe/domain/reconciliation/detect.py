"""Conflict detection over the two uniqueness keys.

Responsibilities of this stage:
- build the id and email indices from scratch for the current record set
- report every bucket holding more than one record as a ``ConflictGroup``

Indices are never patched incrementally; callers rebuild them whenever the
record set changes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeAlias

from json_dedupe.domain.model import ConflictKind

from .contracts import ConflictGroup

if TYPE_CHECKING:
    from collections.abc import Iterable

    from json_dedupe.domain.model import LeadRecord


RecordIndex: TypeAlias = "dict[str, list[LeadRecord]]"


@dataclass(frozen=True, slots=True)
class RecordIndices:
    """Both key indices for one snapshot of the record set."""

    by_id: RecordIndex = field(default_factory=dict["str", "list[LeadRecord]"])
    by_email: RecordIndex = field(default_factory=dict["str", "list[LeadRecord]"])

    @property
    def unique_ids(self) -> int:
        return len(self.by_id)

    @property
    def unique_emails(self) -> int:
        return len(self.by_email)


def build_indices(records: Iterable[LeadRecord]) -> RecordIndices:
    """Index ``records`` by id and by email, keeping input order inside each bucket."""

    indices = RecordIndices()
    for record in records:
        indices.by_id.setdefault(record.record_id, []).append(record)
        indices.by_email.setdefault(record.email, []).append(record)
    return indices


def detect_groups(indices: RecordIndices) -> tuple[ConflictGroup, ...]:
    """Return id groups followed by email groups, each in first-seen key order."""

    return (
        *_groups_for(indices.by_id, kind=ConflictKind.ID),
        *_groups_for(indices.by_email, kind=ConflictKind.EMAIL),
    )


def _groups_for(index: RecordIndex, *, kind: ConflictKind) -> list[ConflictGroup]:
    return [
        ConflictGroup(kind=kind, key=key, members=tuple(bucket))
        for key, bucket in index.items()
        if len(bucket) > 1
    ]
