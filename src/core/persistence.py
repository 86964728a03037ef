"""Save and restore interpreter state through a key-value store."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Protocol

from src.engine.catalog import Catalog, InterpreterState, Session

LOGGER = logging.getLogger(__name__)

DATABASES_KEY = "mysql_databases"
SELECTED_DATABASE_KEY = "mysql_selected_db"


class KeyValueStore(Protocol):
    """String-to-string storage such as browser local storage or a JSON file."""

    def get(self, key: str) -> str | None:  # pragma: no cover - interface
        ...

    def set(self, key: str, value: str) -> None:  # pragma: no cover - interface
        ...

    def delete(self, key: str) -> None:  # pragma: no cover - interface
        ...


@dataclass(slots=True)
class CatalogRepository:
    """Serializes the catalog snapshot and the selected database name."""

    store: KeyValueStore

    def load(self) -> InterpreterState:
        catalog = Catalog()
        raw = self.store.get(DATABASES_KEY)
        if raw:
            try:
                payload = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Stored catalog under '{DATABASES_KEY}' is not valid JSON") from exc
            if not isinstance(payload, list):
                raise ValueError(f"Stored catalog under '{DATABASES_KEY}' must be a list")
            catalog = Catalog.from_snapshot(payload)

        session = Session()
        selected = self.store.get(SELECTED_DATABASE_KEY)
        if selected:
            database = catalog.find(selected)
            if database is None:
                LOGGER.warning("Ignoring stored selection of missing database '%s'", selected)
            else:
                session = Session(selected_database=database.name)

        LOGGER.debug(
            "Loaded %s database(s), selected=%s",
            len(catalog.databases),
            session.selected_database,
        )
        return InterpreterState(catalog=catalog, session=session)

    def save(self, state: InterpreterState) -> None:
        snapshot = state.catalog.to_snapshot()
        self.store.set(DATABASES_KEY, json.dumps(snapshot, ensure_ascii=False))
        if state.session.selected_database:
            self.store.set(SELECTED_DATABASE_KEY, state.session.selected_database)
        else:
            self.store.delete(SELECTED_DATABASE_KEY)
