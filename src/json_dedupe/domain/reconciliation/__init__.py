"""Conflict detection, resolution and audit logging for lead records.

Stage flow for one batch:
1) build id and email indices (``detect``)
2) report buckets with more than one record as conflict groups (``detect``)
3) union groups into connected components across both keys (``graph``)
4) pick one canonical record per component (``policy``)
5) record a field-level diff per dropped record (``changelog``)
"""

from __future__ import annotations

from .changelog import ChangeLog, ChangeLogger, ChangeLogSummary, LogEntry, LoggerState
from .contracts import (
    ConflictGroup,
    DeduplicationResult,
    DeduplicationSummary,
    MergeDecision,
    ResolutionComponent,
)
from .detect import RecordIndices, build_indices, detect_groups
from .engine import DeduplicationEngine, EngineStatistics
from .graph import build_components
from .policy import resolve_component, resolve_components

__all__ = [
    "ChangeLog",
    "ChangeLogSummary",
    "ChangeLogger",
    "ConflictGroup",
    "DeduplicationEngine",
    "DeduplicationResult",
    "DeduplicationSummary",
    "EngineStatistics",
    "LogEntry",
    "LoggerState",
    "MergeDecision",
    "RecordIndices",
    "ResolutionComponent",
    "build_components",
    "build_indices",
    "detect_groups",
    "resolve_component",
    "resolve_components",
]
