"""Write deduplicated lead documents and change logs to disk."""

from __future__ import annotations

import json
import os
import shutil
from dataclasses import dataclass
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Final

from json_dedupe.config import DedupeConfig
from json_dedupe.domain.dates import utcnow

from .errors import InvalidOutputFilenameError, OutputWriteError
from .parser import STDIN_SOURCE

if TYPE_CHECKING:
    from collections.abc import Iterable

    from json_dedupe.domain.dates import Clock
    from json_dedupe.domain.model import LeadRecord
    from json_dedupe.domain.reconciliation import ChangeLogger

STDIN_OUTPUT_FILENAME: Final[str] = "deduplicated_output.json"
_SIZE_UNITS: Final[tuple[str, ...]] = ("B", "KB", "MB", "GB")

log = getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class OutputResult:
    output_file: Path | None = None
    log_file: Path | None = None
    file_size: int | None = None


class OutputManager:
    """Name and write output/log files under the configured directories."""

    def __init__(self, config: DedupeConfig | None = None, *, clock: Clock = utcnow) -> None:
        self._config = config or DedupeConfig()
        self._clock = clock

    @property
    def output_dir(self) -> Path:
        return self._config.output_dir

    @property
    def log_dir(self) -> Path:
        return self._config.log_dir

    def default_output_filename(self, input_file: str | None) -> str:
        """``<input-stem>_deduplicated_<timestamp>.json`` or a fixed name for stdin."""

        if not input_file or input_file == STDIN_SOURCE:
            return STDIN_OUTPUT_FILENAME
        timestamp = self._clock().strftime("%Y-%m-%dT%H-%M-%S")
        return f"{Path(input_file).stem}_deduplicated_{timestamp}.json"

    @staticmethod
    def log_filename(output_file: str | Path) -> str:
        return f"{Path(output_file).stem}_changes.log.json"

    def write_output_file(
        self,
        records: Iterable[LeadRecord],
        output_file: str | None = None,
        input_file: str | None = None,
    ) -> OutputResult:
        path, size = self._write_document(records, output_file, input_file)
        return OutputResult(output_file=path, file_size=size)

    def write_log_file(
        self,
        logger: ChangeLogger,
        output_file: str | Path,
        log_file: str | None = None,
    ) -> OutputResult:
        path = self.log_dir / (log_file or self.log_filename(output_file))
        size = self._write_text(path, logger.to_json(pretty=True))
        log.debug("Wrote change log (%s) to %s", format_file_size(size), path)
        return OutputResult(log_file=path, file_size=size)

    def write_output_and_log(
        self,
        records: Iterable[LeadRecord],
        logger: ChangeLogger,
        *,
        output_file: str | None = None,
        input_file: str | None = None,
        log_file: str | None = None,
    ) -> OutputResult:
        """Write the output document first, then the change log named after it."""

        output_path, size = self._write_document(records, output_file, input_file)
        change_log = self.write_log_file(logger, output_path, log_file)
        return OutputResult(output_file=output_path, log_file=change_log.log_file, file_size=size)

    def _write_document(
        self,
        records: Iterable[LeadRecord],
        output_file: str | None,
        input_file: str | None,
    ) -> tuple[Path, int]:
        path = self.output_dir / (output_file or self.default_output_filename(input_file))
        document = {"leads": [record.to_payload() for record in records]}
        size = self._write_text(path, json.dumps(document, indent=2, ensure_ascii=False))
        log.debug("Wrote %s to %s", format_file_size(size), path)
        return path, size

    def cleanup_temp_file(self, path: Path) -> None:
        _temp_path(path).unlink(missing_ok=True)

    def _write_text(self, path: Path, content: str) -> int:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            if self._config.atomic_write:
                self._write_atomically(path, content)
            else:
                path.write_text(content, encoding="utf-8")
            return path.stat().st_size
        except OSError as exc:
            raise OutputWriteError(path, exc.strerror or str(exc)) from exc

    def _write_atomically(self, path: Path, content: str) -> None:
        temp_path = _temp_path(path)
        try:
            temp_path.write_text(content, encoding="utf-8")
            if self._config.create_backup and path.exists():
                shutil.copyfile(path, path.with_name(f"{path.name}.backup"))
            os.replace(temp_path, path)
        except OSError:
            self.cleanup_temp_file(path)
            raise


def validate_output_filename(filename: str) -> str:
    """Return ``filename`` if it is a bare ``.json`` name, else raise."""

    if not filename or not filename.strip():
        raise InvalidOutputFilenameError("Output filename cannot be empty")
    if ".." in filename or "/" in filename or "\\" in filename:
        raise InvalidOutputFilenameError("Output filename cannot contain path separators")
    if not filename.endswith(".json"):
        raise InvalidOutputFilenameError("Output filename must end with .json")
    return filename


def format_file_size(size: int) -> str:
    value = float(size)
    unit_index = 0
    while value >= 1024 and unit_index < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit_index += 1
    return f"{value:.1f} {_SIZE_UNITS[unit_index]}"


def _temp_path(path: Path) -> Path:
    return path.with_name(f"{path.name}.tmp")
