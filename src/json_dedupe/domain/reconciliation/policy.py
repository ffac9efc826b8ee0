"""Canonical record selection for resolution components.

Ordering inside a component:
1) parsed recency, most recent first
2) when recency cannot separate two records (equal instants, or either side
   unparseable) the record appearing later in the input wins

The first record after ordering is kept; every other member is dropped with
``newer_date`` if the kept record is strictly more recent, else
``last_in_list``.

Unparseable recency is deliberately *incomparable* rather than *oldest*: a
record with a broken timestamp can win purely on list position. The pairwise
rule is not transitive once valid and unparseable values mix, so the sort
always starts from input order to stay deterministic.
"""

from __future__ import annotations

from functools import cmp_to_key
from typing import TYPE_CHECKING, Protocol

from json_dedupe.domain.model import MergeReason

from .contracts import MergeDecision

if TYPE_CHECKING:
    from collections.abc import Iterable

    from json_dedupe.domain.model import LeadRecord

    from .contracts import ResolutionComponent


class ResolveComponents(Protocol):
    """Turn resolution components into merge decisions."""

    def __call__(
        self,
        components: Iterable[ResolutionComponent],
    ) -> tuple[MergeDecision, ...]: ...


def resolve_components(components: Iterable[ResolutionComponent]) -> tuple[MergeDecision, ...]:
    """Resolve each component in order and concatenate their decisions."""

    decisions: list[MergeDecision] = []
    for component in components:
        decisions.extend(resolve_component(component))
    return tuple(decisions)


def resolve_component(component: ResolutionComponent) -> tuple[MergeDecision, ...]:
    ranked = rank_members(component)
    kept, *dropped = ranked
    conflict_kind = component.kind
    return tuple(
        MergeDecision(
            kept=kept,
            dropped=record,
            reason=merge_reason(kept, record),
            conflict_kind=conflict_kind,
        )
        for record in dropped
    )


def rank_members(component: ResolutionComponent) -> list[LeadRecord]:
    """Return component members best-first."""

    positions = component.positions or tuple(range(len(component.members)))
    ranked = sorted(
        zip(positions, component.members, strict=True),
        key=cmp_to_key(_compare_ranked),
    )
    return [record for _position, record in ranked]


def merge_reason(kept: LeadRecord, dropped: LeadRecord) -> MergeReason:
    if kept.compare_recency(dropped) > 0:
        return MergeReason.NEWER_DATE
    return MergeReason.LAST_IN_LIST


def _compare_ranked(left: tuple[int, LeadRecord], right: tuple[int, LeadRecord]) -> int:
    left_position, left_record = left
    right_position, right_record = right
    by_recency = left_record.compare_recency(right_record)
    if by_recency != 0:
        return -by_recency
    return right_position - left_position
