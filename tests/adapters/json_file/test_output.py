from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING

import pytest

from json_dedupe.adapters.json_file import (
    InvalidOutputFilenameError,
    OutputManager,
    OutputWriteError,
    format_file_size,
    validate_output_filename,
)
from json_dedupe.config import DedupeConfig
from json_dedupe.domain.model import ConflictKind, MergeReason
from json_dedupe.domain.reconciliation import ChangeLogger, MergeDecision
from tests.support.clock import fixed_clock
from tests.support.records import make_record

if TYPE_CHECKING:
    from pathlib import Path


def _manager(config: DedupeConfig) -> OutputManager:
    return OutputManager(config, clock=fixed_clock)


def test_default_output_filename_uses_input_stem_and_timestamp(
    dedupe_config: DedupeConfig,
) -> None:
    manager = _manager(dedupe_config)

    assert (
        manager.default_output_filename("data/leads.json")
        == "leads_deduplicated_2024-03-01T12-30-45.json"
    )
    assert manager.default_output_filename("-") == "deduplicated_output.json"
    assert manager.default_output_filename(None) == "deduplicated_output.json"


def test_log_filename_follows_output_stem() -> None:
    assert OutputManager.log_filename("clean.json") == "clean_changes.log.json"


def test_write_output_file_writes_leads_document(dedupe_config: DedupeConfig) -> None:
    manager = _manager(dedupe_config)
    records = [make_record("1", "a@x", firstName="Ada"), make_record("2", "b@x")]

    result = manager.write_output_file(records, "clean.json")

    assert result.output_file == dedupe_config.output_dir / "clean.json"
    assert result.output_file.read_text(encoding="utf-8").startswith('{\n  "leads": [')
    document = json.loads(result.output_file.read_text(encoding="utf-8"))
    assert document == {"leads": [record.to_payload() for record in records]}
    assert result.file_size == result.output_file.stat().st_size
    assert not (dedupe_config.output_dir / "clean.json.tmp").exists()


def test_write_output_file_defaults_name_from_input(dedupe_config: DedupeConfig) -> None:
    result = _manager(dedupe_config).write_output_file([], input_file="leads.json")

    assert result.output_file is not None
    assert result.output_file.name == "leads_deduplicated_2024-03-01T12-30-45.json"


def test_write_output_and_log_writes_both_files(dedupe_config: DedupeConfig) -> None:
    kept = make_record("x", "new@x", "2020-01-02")
    dropped = make_record("x", "old@x", "2020-01-01")
    logger = ChangeLogger(clock=fixed_clock)
    logger.log_decision(
        MergeDecision(
            kept=kept,
            dropped=dropped,
            reason=MergeReason.NEWER_DATE,
            conflict_kind=ConflictKind.ID,
        )
    )

    result = _manager(dedupe_config).write_output_and_log([kept], logger, output_file="out.json")

    assert result.output_file == dedupe_config.output_dir / "out.json"
    assert result.log_file == dedupe_config.log_dir / "out_changes.log.json"
    assert result.log_file is not None
    change_log = json.loads(result.log_file.read_text(encoding="utf-8"))
    assert change_log["summary"]["totalConflicts"] == 1
    assert change_log["entries"][0]["metadata"]["droppedRecordEmail"] == "old@x"


def test_explicit_log_file_name_is_used(dedupe_config: DedupeConfig) -> None:
    logger = ChangeLogger(clock=fixed_clock)

    result = _manager(dedupe_config).write_output_and_log(
        [], logger, output_file="out.json", log_file="audit.json"
    )

    assert result.log_file == dedupe_config.log_dir / "audit.json"


def test_backup_keeps_previous_output(tmp_path: Path) -> None:
    config = DedupeConfig(output_dir=tmp_path, log_dir=tmp_path, create_backup=True)
    manager = _manager(config)
    target = tmp_path / "clean.json"
    target.write_text("previous", encoding="utf-8")

    manager.write_output_file([make_record()], "clean.json")

    assert (tmp_path / "clean.json.backup").read_text(encoding="utf-8") == "previous"
    assert json.loads(target.read_text(encoding="utf-8"))["leads"][0]["_id"] == "id-1"


def test_non_atomic_write_writes_directly(tmp_path: Path) -> None:
    config = DedupeConfig(output_dir=tmp_path, log_dir=tmp_path, atomic_write=False)

    result = _manager(config).write_output_file([], "clean.json")

    assert result.output_file is not None
    assert json.loads(result.output_file.read_text(encoding="utf-8")) == {"leads": []}


def test_failed_replace_raises_and_removes_temp_file(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    config = DedupeConfig(output_dir=tmp_path, log_dir=tmp_path)

    def failing_replace(*_: object) -> None:
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(os, "replace", failing_replace)

    with pytest.raises(OutputWriteError) as excinfo:
        _manager(config).write_output_file([], "clean.json")

    assert excinfo.value.path == str(tmp_path / "clean.json")
    assert excinfo.value.reason == "Permission denied"
    assert not (tmp_path / "clean.json.tmp").exists()
    assert not (tmp_path / "clean.json").exists()


@pytest.mark.parametrize("filename", ["clean.json", "report-2024.json"])
def test_validate_output_filename_accepts_bare_json_names(filename: str) -> None:
    assert validate_output_filename(filename) == filename


@pytest.mark.parametrize(
    ("filename", "message"),
    [
        ("", "cannot be empty"),
        ("  ", "cannot be empty"),
        ("../clean.json", "path separators"),
        ("out/clean.json", "path separators"),
        ("out\\clean.json", "path separators"),
        ("clean.txt", "must end with .json"),
    ],
)
def test_validate_output_filename_rejects(filename: str, message: str) -> None:
    with pytest.raises(InvalidOutputFilenameError, match=message):
        validate_output_filename(filename)


@pytest.mark.parametrize(
    ("size", "expected"),
    [
        (0, "0.0 B"),
        (512, "512.0 B"),
        (1536, "1.5 KB"),
        (5 * 1024 * 1024, "5.0 MB"),
        (3 * 1024**3, "3.0 GB"),
        (2048 * 1024**3, "2048.0 GB"),
    ],
)
def test_format_file_size(size: int, expected: str) -> None:
    assert format_file_size(size) == expected


def test_write_output_and_log_reports_output_size(dedupe_config: DedupeConfig) -> None:
    records = [make_record("1", "a@x")]

    result = _manager(dedupe_config).write_output_and_log(
        records, ChangeLogger(clock=fixed_clock), input_file="leads.json"
    )

    assert result.output_file == (
        dedupe_config.output_dir / "leads_deduplicated_2024-03-01T12-30-45.json"
    )
    assert result.file_size == result.output_file.stat().st_size
    assert result.log_file == (
        dedupe_config.log_dir / "leads_deduplicated_2024-03-01T12-30-45_changes.log.json"
    )
