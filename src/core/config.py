"""Utilities for loading playground settings from YAML configuration files."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

STORAGE_BACKENDS = ("memory", "json")


@dataclass(slots=True)
class StorageSettings:
    backend: str = "memory"
    path: str | None = None
    path_env: str | None = None

    def resolve_path(self) -> Path:
        """Return the snapshot file, preferring the ``path_env`` variable when set."""

        value = os.getenv(self.path_env) if self.path_env else None
        if not value:
            value = self.path
        if not value:
            raise ValueError("Storage backend 'json' requires 'path' or 'path_env'")
        return Path(value).expanduser()


@dataclass(slots=True)
class PathsSettings:
    statement_logs_dir: str | None = None


@dataclass(slots=True)
class HistorySettings:
    limit: int | None = None


@dataclass(slots=True)
class Settings:
    storage: StorageSettings = field(default_factory=StorageSettings)
    paths: PathsSettings | None = None
    history: HistorySettings = field(default_factory=HistorySettings)


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def load_settings(path: str | Path) -> Settings:
    """Read configuration from *path* and return structured settings."""

    config_path = Path(path)
    raw = _load_yaml(config_path)

    storage_raw = raw.get("storage") or {}
    backend = str(storage_raw.get("backend", "memory")).lower()
    if backend not in STORAGE_BACKENDS:
        raise ValueError(
            f"Unknown storage backend '{backend}'. Expected one of: {', '.join(STORAGE_BACKENDS)}"
        )
    storage_path = storage_raw.get("path")
    path_env = storage_raw.get("path_env")
    storage = StorageSettings(
        backend=backend,
        path=str(storage_path) if storage_path else None,
        path_env=str(path_env) if path_env else None,
    )

    paths_raw: dict[str, Any] | None = raw.get("paths")
    paths = None
    if paths_raw:
        logs_dir = paths_raw.get("statement_logs_dir")
        paths = PathsSettings(statement_logs_dir=str(logs_dir) if logs_dir else None)

    history_raw = raw.get("history") or {}
    limit = history_raw.get("limit")
    history = HistorySettings(limit=int(limit) if limit is not None else None)

    return Settings(storage=storage, paths=paths, history=history)
