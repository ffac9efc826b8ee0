from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from json_dedupe.config import DedupeConfig

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def dedupe_config(tmp_path: Path) -> DedupeConfig:
    return DedupeConfig(output_dir=tmp_path / "out", log_dir=tmp_path / "logs")


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "JSON_DEDUPE_TIMESTAMP_KEY",
        "JSON_DEDUPE_OUTPUT_DIR",
        "JSON_DEDUPE_LOG_DIR",
        "JSON_DEDUPE_ATOMIC_WRITE",
        "JSON_DEDUPE_CREATE_BACKUP",
    ):
        monkeypatch.delenv(name, raising=False)
