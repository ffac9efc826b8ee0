"""Semantic validation of parsed lead records.

Structural problems (missing keys, wrong JSON types) are rejected by the parser.
This stage checks what a well-formed record can still get wrong: blank values in
required fields and recency values that cannot be parsed. All records are
checked before anything is reported so the user sees every problem at once.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from json_dedupe.domain.dates import is_valid_date
from json_dedupe.domain.model import DEFAULT_RECENCY_FIELD, EMAIL_FIELD, ID_FIELD

if TYPE_CHECKING:
    from collections.abc import Sequence

    from json_dedupe.domain.model import LeadRecord

MAX_EXAMPLES_PER_TYPE: Final[int] = 3


class ValidationErrorType(StrEnum):
    MISSING_FIELD = "missing_field"
    EMPTY_VALUE = "empty_value"
    INVALID_DATE = "invalid_date"


_TYPE_DESCRIPTIONS: Final[dict[ValidationErrorType, str]] = {
    ValidationErrorType.MISSING_FIELD: "Missing Required Fields",
    ValidationErrorType.EMPTY_VALUE: "Empty Values",
    ValidationErrorType.INVALID_DATE: "Invalid Date Formats",
}


@dataclass(frozen=True, slots=True, kw_only=True)
class ValidationIssue:
    type: ValidationErrorType
    field: str
    message: str
    record_index: int | None = None
    record_id: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ValidationSummary:
    total_records: int
    valid_records: int
    issues: tuple[ValidationIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.issues

    @property
    def invalid_records(self) -> int:
        return self.total_records - self.valid_records

    @property
    def counts_by_type(self) -> dict[ValidationErrorType, int]:
        return dict(Counter(issue.type for issue in self.issues))


class ValidationFailedError(ValueError):
    """Raised when a batch contains invalid records."""

    def __init__(self, summary: ValidationSummary, report: str) -> None:
        self.summary = summary
        super().__init__(report)


@dataclass(frozen=True, slots=True, kw_only=True)
class ValidationConfig:
    required_fields: tuple[str, ...] = (ID_FIELD, EMAIL_FIELD, DEFAULT_RECENCY_FIELD)
    date_fields: tuple[str, ...] = (DEFAULT_RECENCY_FIELD,)
    fallback_date_formats: tuple[str, ...] = field(default=())
    allow_empty_values: bool = False

    @classmethod
    def for_recency_key(cls, recency_key: str) -> ValidationConfig:
        return cls(
            required_fields=(ID_FIELD, EMAIL_FIELD, recency_key),
            date_fields=(recency_key,),
        )


class RecordValidator:
    """Check records against a ``ValidationConfig``."""

    def __init__(self, config: ValidationConfig | None = None) -> None:
        self._config = config or ValidationConfig()

    @property
    def config(self) -> ValidationConfig:
        return self._config

    def validate_record(self, record: LeadRecord, index: int = 0) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []

        for name in self._config.required_fields:
            value = record.get(name)
            if value is None:
                issues.append(
                    self._issue(
                        ValidationErrorType.MISSING_FIELD,
                        name,
                        f"Missing required field: {name}",
                        record,
                        index,
                    )
                )
            elif (
                not self._config.allow_empty_values
                and isinstance(value, str)
                and not value.strip()
            ):
                issues.append(
                    self._issue(
                        ValidationErrorType.EMPTY_VALUE,
                        name,
                        f"Empty value for required field: {name}",
                        record,
                        index,
                    )
                )

        for name in self._config.date_fields:
            value = record.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                continue
            text = value if isinstance(value, str) else str(value)
            if not is_valid_date(text, fallback_formats=self._config.fallback_date_formats):
                issues.append(
                    self._issue(
                        ValidationErrorType.INVALID_DATE,
                        name,
                        f"Invalid date format for field {name}: {value}",
                        record,
                        index,
                    )
                )

        return issues

    def validate_records(self, records: Sequence[LeadRecord]) -> ValidationSummary:
        issues: list[ValidationIssue] = []
        valid_records = 0
        for index, record in enumerate(records):
            record_issues = self.validate_record(record, index)
            if record_issues:
                issues.extend(record_issues)
            else:
                valid_records += 1
        return ValidationSummary(
            total_records=len(records),
            valid_records=valid_records,
            issues=tuple(issues),
        )

    def ensure_valid(self, records: Sequence[LeadRecord]) -> ValidationSummary:
        """Validate ``records`` and raise ``ValidationFailedError`` on any issue."""

        summary = self.validate_records(records)
        if not summary.is_valid:
            raise ValidationFailedError(summary, self.error_report(summary))
        return summary

    def error_report(self, summary: ValidationSummary) -> str:
        """Render a human-readable report with a few examples per error type."""

        if summary.is_valid:
            return "All records are valid."

        lines = [
            f"Validation failed: {summary.invalid_records} of {summary.total_records} "
            "records have errors.",
            "",
        ]
        grouped: dict[ValidationErrorType, list[ValidationIssue]] = {}
        for issue in summary.issues:
            grouped.setdefault(issue.type, []).append(issue)

        for issue_type, issues in grouped.items():
            lines.append(f"{_TYPE_DESCRIPTIONS[issue_type]} ({len(issues)} occurrences):")
            for issue in issues[:MAX_EXAMPLES_PER_TYPE]:
                location = (
                    f" at record {issue.record_index}" if issue.record_index is not None else ""
                )
                record_id = f" (ID: {issue.record_id})" if issue.record_id else ""
                lines.append(f"  - {issue.message}{location}{record_id}")
            if len(issues) > MAX_EXAMPLES_PER_TYPE:
                lines.append(
                    f"  ... and {len(issues) - MAX_EXAMPLES_PER_TYPE} more similar errors"
                )
            lines.append("")

        return "\n".join(lines).rstrip("\n")

    def example_issues(self, summary: ValidationSummary) -> list[ValidationIssue]:
        """Return the first issue of each type, in order of appearance."""

        examples: dict[ValidationErrorType, ValidationIssue] = {}
        for issue in summary.issues:
            examples.setdefault(issue.type, issue)
        return list(examples.values())

    @staticmethod
    def _issue(
        issue_type: ValidationErrorType,
        name: str,
        message: str,
        record: LeadRecord,
        index: int,
    ) -> ValidationIssue:
        return ValidationIssue(
            type=issue_type,
            field=name,
            message=message,
            record_index=index,
            record_id=record.record_id or None,
        )
