"""Shared reconciliation contract components.

This module intentionally holds only the transient value types passed between
detection, grouping, resolution and change logging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from json_dedupe.domain.model import ConflictKind

if TYPE_CHECKING:
    from json_dedupe.domain.model import LeadRecord, MergeReason


@dataclass(frozen=True, slots=True, kw_only=True)
class ConflictGroup:
    """Index bucket holding two or more records that share one key value."""

    kind: ConflictKind
    key: str
    members: tuple[LeadRecord, ...]

    def __post_init__(self) -> None:
        if self.kind is ConflictKind.CROSS:
            raise ValueError("Conflict groups are produced by a single index (id or email)")
        if len(self.members) < 2:
            raise ValueError("Conflict group must contain at least two records")

    @property
    def record_ids(self) -> tuple[str, ...]:
        return tuple(record.record_id for record in self.members)


@dataclass(frozen=True, slots=True, kw_only=True)
class ResolutionComponent:
    """Records linked, directly or transitively, through id or email groups."""

    members: tuple[LeadRecord, ...]
    kinds: frozenset[ConflictKind]
    positions: tuple[int, ...] = field(default=(), repr=False)

    @property
    def kind(self) -> ConflictKind:
        if len(self.kinds) > 1:
            return ConflictKind.CROSS
        return next(iter(self.kinds))

    @property
    def is_cross(self) -> bool:
        return self.kind is ConflictKind.CROSS


@dataclass(frozen=True, slots=True, kw_only=True, eq=False)
class MergeDecision:
    """One dropped record and the canonical record it was resolved to."""

    kept: LeadRecord
    dropped: LeadRecord
    reason: MergeReason
    conflict_kind: ConflictKind


@dataclass(frozen=True, slots=True, kw_only=True)
class DeduplicationSummary:
    total_records: int
    unique_records: int
    conflicts_resolved: int
    components: int
    cross_components: int


@dataclass(frozen=True, slots=True, kw_only=True)
class DeduplicationResult:
    """Everything one engine run produced, in deterministic order."""

    unique_records: tuple[LeadRecord, ...]
    decisions: tuple[MergeDecision, ...]
    groups: tuple[ConflictGroup, ...]
    components: tuple[ResolutionComponent, ...]

    @property
    def dropped_records(self) -> tuple[LeadRecord, ...]:
        return tuple(decision.dropped for decision in self.decisions)

    @property
    def cross_components(self) -> tuple[ResolutionComponent, ...]:
        return tuple(component for component in self.components if component.is_cross)

    @property
    def summary(self) -> DeduplicationSummary:
        return DeduplicationSummary(
            total_records=len(self.unique_records) + len(self.decisions),
            unique_records=len(self.unique_records),
            conflicts_resolved=len(self.decisions),
            components=len(self.components),
            cross_components=len(self.cross_components),
        )
