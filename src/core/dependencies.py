"""Factory helpers for constructing playground dependencies from settings."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path

from src.core.config import Settings
from src.core.observability import JSONLStatementLogger, StatementObservationSink
from src.core.persistence import CatalogRepository, KeyValueStore
from src.engine.catalog import Catalog, InterpreterState
from src.engine.interpreter import Interpreter
from src.integrations.json_file_store import JSONFileKeyValueStore
from src.integrations.memory_store import InMemoryKeyValueStore

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class SharedCatalog:
    """The one catalog every session reads and writes, loaded lazily from storage.

    Statements from all sessions run under ``lock`` so a change is always
    applied to the latest catalog and saved before the next statement starts.
    """

    repository: CatalogRepository
    lock: threading.RLock = field(default_factory=threading.RLock)
    _state: InterpreterState | None = field(default=None, init=False)

    def snapshot(self) -> InterpreterState:
        """Return the last committed state, restoring it from storage on first use."""

        with self.lock:
            if self._state is None:
                self._state = self.repository.load()
                LOGGER.info("Restored %s database(s) from storage", len(self._state.catalog.databases))
            return self._state

    def current_catalog(self) -> Catalog:
        return self.snapshot().catalog

    def commit(self, state: InterpreterState) -> None:
        with self.lock:
            self._state = state
            self.repository.save(state)


@dataclass(slots=True)
class PlaygroundDependencies:
    """Collection of collaborators shared by every interpreter session."""

    repository: CatalogRepository
    statement_logger: StatementObservationSink | None = None
    history_limit: int | None = None
    shared: SharedCatalog = field(init=False)

    def __post_init__(self) -> None:
        self.shared = SharedCatalog(repository=self.repository)

    def create_interpreter(self, session_id: str) -> Interpreter:
        """Return an interpreter over the shared catalog that saves after each change.

        The new session starts with the most recently saved selection.
        """

        return Interpreter(
            state=self.shared.snapshot(),
            on_change=self.shared.commit,
            logger=self.statement_logger,
            session_id=session_id,
            history_limit=self.history_limit,
            catalog_source=self.shared.current_catalog,
            guard=self.shared.lock,
        )


def build_dependencies(settings: Settings) -> PlaygroundDependencies:
    """Create dependency instances based on *settings*."""

    store = _build_store(settings)
    logs_dir = _resolve_statement_logs_dir(settings)
    return PlaygroundDependencies(
        repository=CatalogRepository(store=store),
        statement_logger=JSONLStatementLogger(base_dir=logs_dir),
        history_limit=settings.history.limit,
    )


def _build_store(settings: Settings) -> KeyValueStore:
    if settings.storage.backend == "json":
        return JSONFileKeyValueStore(path=settings.storage.resolve_path())
    return InMemoryKeyValueStore()


def _resolve_statement_logs_dir(settings: Settings) -> Path:
    base = (
        settings.paths.statement_logs_dir
        if settings.paths and settings.paths.statement_logs_dir
        else "logs/statements"
    )
    path = Path(base).expanduser()
    path.mkdir(parents=True, exist_ok=True)
    return path
