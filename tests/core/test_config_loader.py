"""Tests for loading playground settings from YAML."""

from __future__ import annotations

from pathlib import Path

import pytest

from src.core.config import StorageSettings, load_settings


def test_load_settings_parses_all_sections(tmp_path: Path) -> None:
    config_path = tmp_path / "dev.yaml"
    config_path.write_text(
        """
storage:
  backend: JSON
  path: data/catalog.json
paths:
  statement_logs_dir: logs/statements
history:
  limit: 50
        """,
        encoding="utf-8",
    )

    settings = load_settings(config_path)

    assert settings.storage.backend == "json"
    assert settings.storage.path == "data/catalog.json"
    assert settings.paths is not None
    assert settings.paths.statement_logs_dir == "logs/statements"
    assert settings.history.limit == 50


def test_empty_file_uses_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "empty.yaml"
    config_path.write_text("", encoding="utf-8")

    settings = load_settings(config_path)

    assert settings.storage.backend == "memory"
    assert settings.paths is None
    assert settings.history.limit is None


def test_unknown_backend_is_rejected(tmp_path: Path) -> None:
    config_path = tmp_path / "bad.yaml"
    config_path.write_text("storage:\n  backend: redis\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Unknown storage backend"):
        load_settings(config_path)


def test_storage_path_prefers_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    storage = StorageSettings(backend="json", path="fallback.json", path_env="PLAYGROUND_STORAGE_PATH")
    monkeypatch.setenv("PLAYGROUND_STORAGE_PATH", str(tmp_path / "env.json"))

    assert storage.resolve_path() == tmp_path / "env.json"

    monkeypatch.delenv("PLAYGROUND_STORAGE_PATH")
    assert storage.resolve_path() == Path("fallback.json")


def test_storage_path_is_required_for_json_backend() -> None:
    with pytest.raises(ValueError):
        StorageSettings(backend="json").resolve_path()
