"""Orchestrator for the deduplication subsystem.

The engine owns the current record batch and runs the stages in order:
index build → group detection → component grouping → canonical selection.
Every call rebuilds its transient state from the records, so results never
depend on which methods were called before.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from logging import getLogger
from typing import TYPE_CHECKING

from json_dedupe.domain.model import ConflictKind

from .contracts import DeduplicationResult
from .detect import build_indices, detect_groups
from .graph import build_components
from .policy import resolve_components

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from json_dedupe.domain.model import LeadRecord

    from .contracts import ConflictGroup, MergeDecision, ResolutionComponent
    from .policy import ResolveComponents


log = getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class EngineStatistics:
    total_records: int
    unique_ids: int
    unique_emails: int
    id_conflicts: int
    email_conflicts: int


@dataclass(slots=True)
class DeduplicationEngine:
    """Resolve id/email conflicts in one in-memory batch of records.

    Not reentrant: callers sharing an instance across threads must serialize
    access themselves.
    """

    resolve_stage: ResolveComponents = resolve_components
    _records: list[LeadRecord] = field(default_factory=list["LeadRecord"], init=False, repr=False)

    @property
    def records(self) -> tuple[LeadRecord, ...]:
        return tuple(self._records)

    def add_records(self, records: Iterable[LeadRecord]) -> None:
        """Append ``records`` after the current batch, preserving their order."""

        seen = {id(record) for record in self._records}
        for record in records:
            if id(record) in seen:
                # the same instance twice must still count as two input records
                record = replace(record)  # noqa: PLW2901
            seen.add(id(record))
            self._records.append(record)
        log.debug("Engine holds %s records", len(self._records))

    def clear(self) -> None:
        self._records.clear()

    def detect_groups(self) -> tuple[ConflictGroup, ...]:
        groups = detect_groups(build_indices(self._records))
        log.debug(
            "Detected %s conflict groups over %s records",
            len(groups),
            len(self._records),
        )
        return groups

    def detect_components(
        self,
        groups: Sequence[ConflictGroup] | None = None,
    ) -> tuple[ResolutionComponent, ...]:
        effective_groups = self.detect_groups() if groups is None else groups
        components = build_components(self._records, effective_groups)
        log.debug(
            "Grouped conflicts into %s components (%s cross)",
            len(components),
            sum(1 for component in components if component.is_cross),
        )
        return components

    def resolve(
        self,
        components: Sequence[ResolutionComponent] | None = None,
    ) -> tuple[MergeDecision, ...]:
        effective_components = self.detect_components() if components is None else components
        return self.resolve_stage(effective_components)

    def deduplicate(self) -> DeduplicationResult:
        """Run all stages and return survivors in their original relative order."""

        groups = self.detect_groups()
        components = self.detect_components(groups)
        decisions = self.resolve(components)

        dropped = {id(decision.dropped) for decision in decisions}
        unique_records = tuple(record for record in self._records if id(record) not in dropped)

        log.debug(
            "Deduplication kept %s of %s records (%s decisions)",
            len(unique_records),
            len(self._records),
            len(decisions),
        )
        return DeduplicationResult(
            unique_records=unique_records,
            decisions=decisions,
            groups=groups,
            components=components,
        )

    def statistics(self) -> EngineStatistics:
        indices = build_indices(self._records)
        groups = detect_groups(indices)
        return EngineStatistics(
            total_records=len(self._records),
            unique_ids=indices.unique_ids,
            unique_emails=indices.unique_emails,
            id_conflicts=sum(1 for group in groups if group.kind is ConflictKind.ID),
            email_conflicts=sum(1 for group in groups if group.kind is ConflictKind.EMAIL),
        )

    def has_cross_conflicts(self) -> bool:
        return any(component.is_cross for component in self.detect_components())
