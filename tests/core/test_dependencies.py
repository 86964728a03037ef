"""Tests for dependency construction."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from src.core.config import HistorySettings, PathsSettings, Settings, StorageSettings
from src.core.dependencies import PlaygroundDependencies, build_dependencies
from src.core.observability import JSONLStatementLogger
from src.core.persistence import CatalogRepository
from src.integrations.json_file_store import JSONFileKeyValueStore
from src.integrations.memory_store import InMemoryKeyValueStore


@pytest.fixture()
def base_settings(tmp_path: Path) -> Settings:
    return Settings(
        storage=StorageSettings(backend="memory"),
        paths=PathsSettings(statement_logs_dir=str(tmp_path / "logs")),
        history=HistorySettings(limit=10),
    )


def test_build_dependencies_defaults_to_memory(base_settings: Settings, tmp_path: Path) -> None:
    deps = build_dependencies(base_settings)

    assert isinstance(deps, PlaygroundDependencies)
    assert isinstance(deps.repository.store, InMemoryKeyValueStore)
    assert isinstance(deps.statement_logger, JSONLStatementLogger)
    assert (tmp_path / "logs").is_dir()
    assert deps.history_limit == 10


def test_build_dependencies_uses_json_file(base_settings: Settings, tmp_path: Path) -> None:
    base_settings.storage = StorageSettings(backend="json", path=str(tmp_path / "catalog.json"))

    deps = build_dependencies(base_settings)
    interpreter = deps.create_interpreter("s-1")
    interpreter.execute("CREATE DATABASE shop;")

    assert isinstance(deps.repository.store, JSONFileKeyValueStore)
    assert (tmp_path / "catalog.json").exists()
    assert deps.create_interpreter("s-2").state.catalog.names() == ["shop"]


def test_created_interpreter_logs_statements(base_settings: Settings, tmp_path: Path) -> None:
    deps = build_dependencies(base_settings)

    deps.create_interpreter("s-9").execute("SHOW DATABASES;")

    assert list((tmp_path / "logs").glob("*-s-9.jsonl"))


def test_sessions_share_one_catalog_and_both_changes_survive_reload(
    base_settings: Settings, tmp_path: Path
) -> None:
    base_settings.storage = StorageSettings(backend="json", path=str(tmp_path / "catalog.json"))
    deps = build_dependencies(base_settings)
    first = deps.create_interpreter("s-1")
    second = deps.create_interpreter("s-2")

    assert first.execute("CREATE DATABASE alpha;").ok
    assert second.execute("CREATE DATABASE beta;").ok
    assert first.execute("USE alpha;").ok

    reloaded = CatalogRepository(store=JSONFileKeyValueStore(path=tmp_path / "catalog.json")).load()
    assert reloaded.catalog.names() == ["alpha", "beta"]
    assert first.selected_database == "alpha"
    assert second.selected_database is None


def test_other_sessions_see_published_changes_before_their_next_statement(
    base_settings: Settings,
) -> None:
    deps = build_dependencies(base_settings)
    writer = deps.create_interpreter("writer")
    reader = deps.create_interpreter("reader")

    writer.execute("CREATE DATABASE shop;")
    writer.execute("USE shop;")
    writer.execute("CREATE TABLE users (name);")

    assert reader.execute("USE shop;").ok
    outcome = reader.execute("SELECT * FROM users;")
    assert outcome.ok
    assert outcome.message == "Retrieved 0 rows from users"

    writer.execute("DROP DATABASE shop;")
    reader.refresh()
    assert reader.explorer() == []


def test_concurrent_sessions_do_not_lose_databases(base_settings: Settings) -> None:
    deps = build_dependencies(base_settings)
    interpreters = [deps.create_interpreter(f"s-{index}") for index in range(8)]

    def _create(index: int) -> None:
        for round_ in range(5):
            interpreters[index].execute(f"CREATE DATABASE db_{index}_{round_};")

    threads = [threading.Thread(target=_create, args=(index,)) for index in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(deps.repository.load().catalog.names()) == 40
