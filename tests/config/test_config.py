from __future__ import annotations

import logging
from pathlib import Path

import pytest

from json_dedupe.config import (
    DEFAULT_TIMESTAMP_KEY,
    ConfigurationError,
    DedupeConfig,
    InvalidEnvironmentValueError,
    configure_logging,
    get_dedupe_config,
    level_for,
)
from json_dedupe.config.env import env_flag, env_path, env_str


def test_get_dedupe_config_defaults(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.chdir(tmp_path)

    config = get_dedupe_config()

    assert config.timestamp_key == DEFAULT_TIMESTAMP_KEY
    assert config.output_dir == tmp_path
    assert config.log_dir == tmp_path
    assert config.atomic_write is True
    assert config.create_backup is False


def test_get_dedupe_config_reads_environment(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.setenv("JSON_DEDUPE_TIMESTAMP_KEY", " updatedAt ")
    monkeypatch.setenv("JSON_DEDUPE_OUTPUT_DIR", str(tmp_path / "out"))
    monkeypatch.setenv("JSON_DEDUPE_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("JSON_DEDUPE_ATOMIC_WRITE", "off")
    monkeypatch.setenv("JSON_DEDUPE_CREATE_BACKUP", "YES")

    config = get_dedupe_config()

    assert config.timestamp_key == "updatedAt"
    assert config.output_dir == tmp_path / "out"
    assert config.log_dir == tmp_path / "logs"
    assert config.atomic_write is False
    assert config.create_backup is True


def test_log_dir_defaults_to_output_dir(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.setenv("JSON_DEDUPE_OUTPUT_DIR", str(tmp_path))

    assert get_dedupe_config().log_dir == tmp_path


def test_invalid_boolean_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("JSON_DEDUPE_ATOMIC_WRITE", "maybe")

    with pytest.raises(ConfigurationError) as exc:
        get_dedupe_config()

    assert "JSON_DEDUPE_ATOMIC_WRITE" in str(exc.value)


def test_env_helpers_fall_back_on_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    assert env_str("EXAMPLE_VAR", "fallback") == "fallback"
    assert env_flag("EXAMPLE_VAR", default=True) is True
    assert env_path("EXAMPLE_VAR", Path("default")) == Path("default")


def test_env_path_expands_user(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("EXAMPLE_DIR", "~/exports")

    assert env_path("EXAMPLE_DIR", Path()) == tmp_path / "exports"


def test_with_overrides_prefers_given_values() -> None:
    config = DedupeConfig(timestamp_key="entryDate", output_dir=Path("a"), log_dir=Path("b"))

    assert config.with_overrides() == config
    overridden = config.with_overrides(timestamp_key="updatedAt", log_dir=Path("c"))
    assert overridden.timestamp_key == "updatedAt"
    assert overridden.output_dir == Path("a")
    assert overridden.log_dir == Path("c")


def test_level_for_maps_cli_switches() -> None:
    assert level_for(verbose=True, quiet=False) == logging.DEBUG
    assert level_for(verbose=False, quiet=True) == logging.WARNING
    assert level_for(verbose=False, quiet=False) == logging.INFO


def test_configure_logging_sets_root_level() -> None:
    root = logging.getLogger()
    previous_level = root.level
    try:
        configure_logging(level=logging.WARNING, force=True)
        assert root.level == logging.WARNING
    finally:
        root.setLevel(previous_level)


@pytest.mark.parametrize("key", ["_id", "email"])
def test_timestamp_key_cannot_be_a_uniqueness_key(
    monkeypatch: pytest.MonkeyPatch,
    key: str,
) -> None:
    monkeypatch.setenv("JSON_DEDUPE_TIMESTAMP_KEY", key)

    with pytest.raises(InvalidEnvironmentValueError) as exc:
        get_dedupe_config()

    assert exc.value.name == "JSON_DEDUPE_TIMESTAMP_KEY"
    assert isinstance(exc.value, ConfigurationError)
