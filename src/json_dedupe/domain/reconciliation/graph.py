"""Connected components across the id and email conflict relations.

Two records are linked when they co-occur in any id group or any email group.
Linking is transitive, so a record sharing its id with one record and its email
with another pulls all three into one component; every component is resolved
as a single unit by the policy stage.

Records are tracked by their position in the input sequence, which also gives
the deterministic ordering of components (by first member) and of members
inside a component.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

from .contracts import ResolutionComponent

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from json_dedupe.domain.model import ConflictKind, LeadRecord

    from .contracts import ConflictGroup


class UnknownGroupMemberError(ValueError):
    """Raised when a conflict group references a record outside the record set."""

    def __init__(self, record: LeadRecord) -> None:
        self.record = record
        super().__init__(f"Conflict group member is not part of the record set: {record}")


def build_components(
    records: Sequence[LeadRecord],
    groups: Iterable[ConflictGroup],
) -> tuple[ResolutionComponent, ...]:
    """Union every group's members and return components in input order."""

    position_by_record = {record: position for position, record in enumerate(records)}
    union_find = _UnionFind()
    grouped_positions: list[tuple[ConflictKind, list[int]]] = []

    for group in groups:
        positions = [_position_of(member, position_by_record) for member in group.members]
        first, *rest = positions
        union_find.add(first)
        for position in rest:
            union_find.union(first, position)
        grouped_positions.append((group.kind, positions))

    kinds_by_root: dict[int, set[ConflictKind]] = defaultdict(set)
    for kind, positions in grouped_positions:
        kinds_by_root[union_find.find(positions[0])].add(kind)

    components: list[ResolutionComponent] = []
    for root, positions in sorted(union_find.groups().items(), key=lambda item: item[1][0]):
        components.append(
            ResolutionComponent(
                members=tuple(records[position] for position in positions),
                kinds=frozenset(kinds_by_root[root]),
                positions=tuple(positions),
            )
        )
    return tuple(components)


def _position_of(record: LeadRecord, position_by_record: dict[LeadRecord, int]) -> int:
    try:
        return position_by_record[record]
    except KeyError as exc:
        raise UnknownGroupMemberError(record) from exc


class _UnionFind:
    def __init__(self) -> None:
        self._parent: dict[int, int] = {}

    def add(self, item: int) -> None:
        self._parent.setdefault(item, item)

    def find(self, item: int) -> int:
        self.add(item)
        root = item
        while self._parent[root] != root:
            root = self._parent[root]
        while self._parent[item] != root:
            self._parent[item], item = root, self._parent[item]
        return root

    def union(self, left: int, right: int) -> None:
        root_left = self.find(left)
        root_right = self.find(right)
        if root_left == root_right:
            return
        # the smaller position stays root so roots are stable across runs
        if root_right < root_left:
            root_left, root_right = root_right, root_left
        self._parent[root_right] = root_left

    def groups(self) -> dict[int, list[int]]:
        grouped: dict[int, list[int]] = defaultdict(list)
        for item in sorted(self._parent):
            grouped[self.find(item)].append(item)
        return grouped
