"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from json_dedupe.adapters.json_file import (
    STDIN_SOURCE,
    InvalidOutputFilenameError,
    JsonDedupeInputError,
    OutputManager,
    parse_inputs,
    validate_output_filename,
)
from json_dedupe.config import ConfigurationError, get_dedupe_config
from json_dedupe.domain.reconciliation import ChangeLogger, DeduplicationEngine
from json_dedupe.domain.validation import (
    RecordValidator,
    ValidationConfig,
    ValidationFailedError,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from typing import TextIO

    from json_dedupe.config import DedupeConfig
    from json_dedupe.domain.dates import Clock

ProgressCallback = Callable[[str, int], None]


log = getLogger(__name__)


class ExitCode(IntEnum):
    SUCCESS = 0
    VALIDATION_ERROR = 1
    IO_ERROR = 2
    GENERAL_ERROR = 3


@dataclass(frozen=True, slots=True, kw_only=True)
class ProcessingStatistics:
    input_records: int
    output_records: int
    conflicts: int
    changes: int
    cross_conflicts: int
    output_file: Path | None = None
    log_file: Path | None = None

    @property
    def duplicates_removed(self) -> int:
        return self.input_records - self.output_records


@dataclass(frozen=True, slots=True, kw_only=True)
class ProcessingResult:
    exit_code: ExitCode
    message: str
    statistics: ProcessingStatistics | None = None

    @property
    def success(self) -> bool:
        return self.exit_code is ExitCode.SUCCESS


def deduplicate_inputs(
    input_files: Sequence[str],
    *,
    output_file: str | None = None,
    log_file: str | None = None,
    timestamp_key: str | None = None,
    dry_run: bool = False,
    config: DedupeConfig | None = None,
    stdin: TextIO | None = None,
    progress: ProgressCallback | None = None,
    clock: Clock | None = None,
) -> ProcessingResult:
    """Parse, validate, deduplicate and write the given inputs.

    Failures are reported through the returned ``ProcessingResult`` rather than
    raised: validation problems map to exit code 1, unreadable or malformed
    input, unusable configuration and unwritable output to 2, anything else to 3.
    """

    report = progress or _log_progress

    try:
        effective_config = (config or get_dedupe_config()).with_overrides(
            timestamp_key=timestamp_key,
        )
        recency_key = effective_config.timestamp_key
        if output_file is not None:
            validate_output_filename(output_file)
        if log_file is not None:
            validate_output_filename(log_file)

        report("Parsing input files...", 10)
        records = parse_inputs(input_files, recency_key=recency_key, stdin=stdin)
        report(f"Parsed {len(records)} records", 20)

        report("Validating records...", 30)
        validator = RecordValidator(ValidationConfig.for_recency_key(recency_key))
        validator.ensure_valid(records)
        report("Validation completed successfully", 40)

        report("Performing deduplication...", 50)
        engine = DeduplicationEngine()
        engine.add_records(records)
        result = engine.deduplicate()
        change_logger = ChangeLogger() if clock is None else ChangeLogger(clock=clock)
        change_logger.log_decisions(result.decisions)
        summary = result.summary
        report(f"Deduplication completed: {summary.conflicts_resolved} conflicts resolved", 70)
        for index, component in enumerate(result.cross_components, start=1):
            log.warning(
                "Cross-conflict group %s resolved: ids=%s, emails=%s",
                index,
                sorted({record.record_id for record in component.members}),
                sorted({record.email for record in component.members}),
            )

        written_output: Path | None = None
        written_log: Path | None = None
        if dry_run:
            report("Dry run: no files written", 90)
        else:
            report("Writing output files...", 80)
            manager = (
                OutputManager(effective_config)
                if clock is None
                else OutputManager(effective_config, clock=clock)
            )
            written = manager.write_output_and_log(
                result.unique_records,
                change_logger,
                output_file=output_file,
                input_file=_first_named_input(input_files),
                log_file=log_file,
            )
            written_output = written.output_file
            written_log = written.log_file
            report("Output files written successfully", 90)

        statistics = ProcessingStatistics(
            input_records=summary.total_records,
            output_records=summary.unique_records,
            conflicts=summary.conflicts_resolved,
            changes=change_logger.summary.total_changes,
            cross_conflicts=summary.cross_components,
            output_file=written_output,
            log_file=written_log,
        )
        report("Processing completed successfully!", 100)
        return ProcessingResult(
            exit_code=ExitCode.SUCCESS,
            message=success_message(statistics, dry_run=dry_run),
            statistics=statistics,
        )

    except ValidationFailedError as exc:
        log.debug("Validation failed", exc_info=exc)
        return ProcessingResult(exit_code=ExitCode.VALIDATION_ERROR, message=str(exc))
    except (JsonDedupeInputError, InvalidOutputFilenameError, ConfigurationError, OSError) as exc:
        log.debug("Input/output failure", exc_info=exc)
        return ProcessingResult(exit_code=ExitCode.IO_ERROR, message=str(exc))
    except Exception as exc:
        log.exception("Unexpected error during deduplication")
        return ProcessingResult(exit_code=ExitCode.GENERAL_ERROR, message=str(exc))


def success_message(statistics: ProcessingStatistics, *, dry_run: bool = False) -> str:
    lines: list[str] = []
    removed = statistics.duplicates_removed
    head = f"Successfully processed {statistics.input_records} records"
    if removed > 0:
        percent = removed / statistics.input_records * 100
        head += f", removed {removed} duplicates ({percent:.1f}% reduction)"
    else:
        head += " (no duplicates found)"
    head += f", output {statistics.output_records} unique records"
    lines.append(head)

    if statistics.conflicts > 0:
        lines.append(
            f"Resolved {statistics.conflicts} conflicts with {statistics.changes} field changes"
        )
        if statistics.cross_conflicts > 0:
            lines.append(
                f"Including {statistics.cross_conflicts} cross-conflicts resolved "
                "by preferring newest dates"
            )
    else:
        lines.append("No conflicts detected")

    if dry_run:
        lines.append("Dry run: no files were written")
    if statistics.output_file is not None:
        lines.append(f"Output written to: {statistics.output_file}")
    if statistics.log_file is not None:
        lines.append(f"Change log written to: {statistics.log_file}")
    return "\n".join(lines)


def _first_named_input(input_files: Sequence[str]) -> str | None:
    if not input_files or input_files[0] == STDIN_SOURCE:
        return None
    return input_files[0]


def _log_progress(message: str, percentage: int) -> None:
    log.info("[%s%%] %s", percentage, message)
