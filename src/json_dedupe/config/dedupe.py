"""Deduplication run configuration."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Final

from .env import env_flag, env_path, env_str
from .errors import InvalidEnvironmentValueError

DEFAULT_TIMESTAMP_KEY: Final[str] = "entryDate"
_RESERVED_KEYS: Final[frozenset[str]] = frozenset({"_id", "email"})


@dataclass(frozen=True, slots=True)
class DedupeConfig:
    """Settings shared by the parser, engine and output manager."""

    timestamp_key: str = DEFAULT_TIMESTAMP_KEY
    output_dir: Path = Path()
    log_dir: Path = Path()
    atomic_write: bool = True
    create_backup: bool = False

    def with_overrides(
        self,
        *,
        timestamp_key: str | None = None,
        output_dir: Path | None = None,
        log_dir: Path | None = None,
    ) -> DedupeConfig:
        """Return a copy with CLI-provided values taking precedence."""

        return replace(
            self,
            timestamp_key=timestamp_key if timestamp_key is not None else self.timestamp_key,
            output_dir=output_dir if output_dir is not None else self.output_dir,
            log_dir=log_dir if log_dir is not None else self.log_dir,
        )


def get_dedupe_config() -> DedupeConfig:
    timestamp_key = env_str("JSON_DEDUPE_TIMESTAMP_KEY", DEFAULT_TIMESTAMP_KEY)
    if timestamp_key in _RESERVED_KEYS:
        raise InvalidEnvironmentValueError(
            "JSON_DEDUPE_TIMESTAMP_KEY", timestamp_key, "a field other than _id or email"
        )
    output_dir = env_path("JSON_DEDUPE_OUTPUT_DIR", Path.cwd())
    return DedupeConfig(
        timestamp_key=timestamp_key,
        output_dir=output_dir,
        log_dir=env_path("JSON_DEDUPE_LOG_DIR", output_dir),
        atomic_write=env_flag("JSON_DEDUPE_ATOMIC_WRITE", default=True),
        create_backup=env_flag("JSON_DEDUPE_CREATE_BACKUP", default=False),
    )
