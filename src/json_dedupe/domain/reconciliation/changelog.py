"""Field-level audit trail for merge decisions.

Each ``MergeDecision`` becomes one ``LogEntry`` listing the fields whose values
differ between the kept and the dropped record, as ``kept<Field>`` and
``dropped<Field>`` pairs. Entries accumulate, together with summary counters,
until ``clear()`` is called. The serialized shape is the one consumed by
downstream tooling, so key names are fixed camelCase.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Final

from json_dedupe.domain.dates import format_timestamp, utcnow
from json_dedupe.domain.model import EMAIL_FIELD, ID_FIELD, ConflictKind

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from json_dedupe.domain.dates import Clock
    from json_dedupe.domain.model import LeadRecord, MergeReason

    from .contracts import MergeDecision


log = getLogger(__name__)

DECLARED_ATTRIBUTES: Final[tuple[str, ...]] = ("firstName", "lastName", "address")


class LoggerState(StrEnum):
    EMPTY = "empty"
    POPULATED = "populated"


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldChange:
    field: str
    kept_value: object | None
    dropped_value: object | None


@dataclass(frozen=True, slots=True, kw_only=True)
class LogEntry:
    """Audit record for one merge decision."""

    timestamp: str
    kept_record_id: str
    dropped_record_id: str
    conflict_kind: ConflictKind
    reason: MergeReason
    changes: Mapping[str, object | None]
    kept_record_email: str
    dropped_record_email: str
    kept_record_date: str
    dropped_record_date: str

    @property
    def change_count(self) -> int:
        return len(self.changes) // 2

    def to_dict(self) -> dict[str, object]:
        return {
            "timestamp": self.timestamp,
            "keptRecordId": self.kept_record_id,
            "droppedRecordId": self.dropped_record_id,
            "conflictType": self.conflict_kind.value,
            "reason": self.reason.value,
            "changes": dict(self.changes),
            "metadata": {
                "keptRecordEmail": self.kept_record_email,
                "droppedRecordEmail": self.dropped_record_email,
                "keptRecordDate": self.kept_record_date,
                "droppedRecordDate": self.dropped_record_date,
            },
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class ChangeLogSummary:
    timestamp: str
    total_conflicts: int = 0
    id_conflicts: int = 0
    email_conflicts: int = 0
    cross_conflicts: int = 0
    total_changes: int = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "totalConflicts": self.total_conflicts,
            "idConflicts": self.id_conflicts,
            "emailConflicts": self.email_conflicts,
            "crossConflicts": self.cross_conflicts,
            "totalChanges": self.total_changes,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True, slots=True)
class ChangeLog:
    summary: ChangeLogSummary
    entries: tuple[LogEntry, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "summary": self.summary.to_dict(),
            "entries": [entry.to_dict() for entry in self.entries],
        }


@dataclass(slots=True, kw_only=True)
class _Counters:
    total_conflicts: int = 0
    total_changes: int = 0
    by_kind: dict[ConflictKind, int] = field(
        default_factory=lambda: dict.fromkeys(ConflictKind, 0)
    )


class ChangeLogger:
    """Accumulate log entries and summary counters for merge decisions."""

    def __init__(
        self,
        *,
        clock: Clock = utcnow,
        declared_fields: Sequence[str] = DECLARED_ATTRIBUTES,
    ) -> None:
        self._clock = clock
        self._declared_fields = tuple(declared_fields)
        self._entries: list[LogEntry] = []
        self._logged: set[MergeDecision] = set()
        self._counters = _Counters()
        self._created_at = self._now()

    @property
    def state(self) -> LoggerState:
        return LoggerState.POPULATED if self._entries else LoggerState.EMPTY

    @property
    def entries(self) -> tuple[LogEntry, ...]:
        return tuple(self._entries)

    @property
    def entry_count(self) -> int:
        return len(self._entries)

    @property
    def has_changes(self) -> bool:
        return bool(self._entries)

    @property
    def summary(self) -> ChangeLogSummary:
        by_kind = self._counters.by_kind
        return ChangeLogSummary(
            timestamp=self._created_at,
            total_conflicts=self._counters.total_conflicts,
            id_conflicts=by_kind[ConflictKind.ID],
            email_conflicts=by_kind[ConflictKind.EMAIL],
            cross_conflicts=by_kind[ConflictKind.CROSS],
            total_changes=self._counters.total_changes,
        )

    @property
    def change_log(self) -> ChangeLog:
        return ChangeLog(summary=self.summary, entries=self.entries)

    def clear(self) -> None:
        self._entries.clear()
        self._logged.clear()
        self._counters = _Counters()
        self._created_at = self._now()

    def log_decision(self, decision: MergeDecision) -> LogEntry | None:
        """Record ``decision``; returns ``None`` when it was already logged."""

        if decision in self._logged:
            log.debug(
                "Skipping already logged decision %s -> %s",
                decision.dropped.record_id,
                decision.kept.record_id,
            )
            return None

        field_changes = self.field_changes(decision.kept, decision.dropped)
        changes: dict[str, object | None] = {}
        for change in field_changes:
            suffix = capitalize_field(change.field)
            changes[f"kept{suffix}"] = change.kept_value
            changes[f"dropped{suffix}"] = change.dropped_value

        entry = LogEntry(
            timestamp=self._now(),
            kept_record_id=decision.kept.record_id,
            dropped_record_id=decision.dropped.record_id,
            conflict_kind=decision.conflict_kind,
            reason=decision.reason,
            changes=changes,
            kept_record_email=decision.kept.email,
            dropped_record_email=decision.dropped.email,
            kept_record_date=decision.kept.entry_date,
            dropped_record_date=decision.dropped.entry_date,
        )
        self._entries.append(entry)
        self._logged.add(decision)
        self._counters.total_conflicts += 1
        self._counters.total_changes += len(field_changes)
        self._counters.by_kind[decision.conflict_kind] += 1
        return entry

    def log_decisions(self, decisions: Iterable[MergeDecision]) -> None:
        for decision in decisions:
            self.log_decision(decision)

    def field_changes(self, kept: LeadRecord, dropped: LeadRecord) -> list[FieldChange]:
        """Compare both records over the known field set, in a fixed order."""

        changes: list[FieldChange] = []
        for name in self._fields_for(kept, dropped):
            kept_value = kept.get(name)
            dropped_value = dropped.get(name)
            if values_differ(kept_value, dropped_value):
                changes.append(
                    FieldChange(field=name, kept_value=kept_value, dropped_value=dropped_value)
                )
        return changes

    def to_json(self, *, pretty: bool = False) -> str:
        payload = self.change_log.to_dict()
        if pretty:
            return json.dumps(payload, indent=2, ensure_ascii=False)
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)

    def by_conflict_kind(self, kind: ConflictKind) -> list[LogEntry]:
        return [entry for entry in self._entries if entry.conflict_kind is kind]

    def by_reason(self, reason: MergeReason) -> list[LogEntry]:
        return [entry for entry in self._entries if entry.reason is reason]

    def by_record_id(self, record_id: str) -> list[LogEntry]:
        return [
            entry
            for entry in self._entries
            if record_id in (entry.kept_record_id, entry.dropped_record_id)
        ]

    def _fields_for(self, kept: LeadRecord, dropped: LeadRecord) -> list[str]:
        names = [
            ID_FIELD,
            EMAIL_FIELD,
            kept.recency_key,
            dropped.recency_key,
            *self._declared_fields,
            *kept.attributes,
            *dropped.attributes,
        ]
        return list(dict.fromkeys(names))

    def _now(self) -> str:
        return format_timestamp(self._clock())


def values_differ(kept_value: object, dropped_value: object) -> bool:
    """Strict inequality: ``True`` differs from ``1``, but ``1`` matches ``1.0``."""

    if type(kept_value) is not type(dropped_value) and not (
        _is_number(kept_value) and _is_number(dropped_value)
    ):
        return True
    return kept_value != dropped_value


def _is_number(value: object) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def capitalize_field(name: str) -> str:
    """Return the suffix used in ``kept<Field>``/``dropped<Field>`` change keys."""

    if name == ID_FIELD:
        return "Id"
    return name[:1].upper() + name[1:]
