"""Statement pipeline: classify, parse, validate, then apply."""

from __future__ import annotations

import logging
from contextlib import AbstractContextManager, nullcontext
from dataclasses import dataclass, field, replace
from typing import Any, Callable

from src.core.observability import StatementObservationSink
from src.engine.catalog import Catalog, InterpreterState
from src.engine.classifier import classify
from src.engine.errors import StatementError
from src.engine.executor import StatementResult, apply
from src.engine.parser import parse
from src.engine.validator import validate

LOGGER = logging.getLogger(__name__)


def execute(statement: str, state: InterpreterState) -> tuple[InterpreterState, StatementResult]:
    """Run *statement* against *state* and return the new state and its result.

    Raises `StatementError` on any failure; *state* itself is never modified.
    """

    kind = classify(statement)
    parsed = parse(statement.strip(), kind)
    validate(parsed, state)
    return apply(parsed, state)


@dataclass(slots=True)
class HistoryEntry:
    statement: str
    ok: bool
    message: str

    def render(self) -> str:
        prefix = "Success" if self.ok else "Error"
        return f"{prefix}: {self.statement}\n{self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {"statement": self.statement, "ok": self.ok, "message": self.message}


@dataclass(slots=True)
class ExecutionOutcome:
    statement: str
    result: StatementResult | None = None
    error: StatementError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        if self.error is not None:
            return self.error.message
        return self.result.message if self.result is not None else ""

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"statement": self.statement, "ok": self.ok}
        if self.error is not None:
            payload["error"] = self.error.to_dict()
        if self.result is not None:
            payload["result"] = self.result.to_dict()
        return payload


@dataclass
class Interpreter:
    """Owns one session's state and records what happened to each statement.

    Sessions that share a catalog pass ``catalog_source`` and ``guard``: the
    interpreter adopts the latest catalog from the source before every
    statement and holds the guard until its own change has been published
    through ``on_change``. The session's database selection stays private.
    """

    state: InterpreterState = field(default_factory=InterpreterState)
    on_change: Callable[[InterpreterState], None] | None = None
    logger: StatementObservationSink | None = None
    session_id: str = "default"
    history_limit: int | None = None
    history: list[HistoryEntry] = field(default_factory=list)
    catalog_source: Callable[[], Catalog] | None = None
    guard: AbstractContextManager[Any] = field(default_factory=nullcontext)

    def execute(self, statement: str) -> ExecutionOutcome:
        """Execute *statement*; statement errors are captured in the outcome."""

        text = statement.strip()
        self._log("statement_received", {"statement": text})
        with self.guard:
            self._adopt_shared_catalog()
            try:
                new_state, result = execute(text, self.state)
            except StatementError as exc:
                LOGGER.debug("Statement failed kind=%s message=%s", exc.kind, exc.message)
                self._log("statement_failed", {"statement": text, **exc.to_dict()})
                self._remember(HistoryEntry(statement=text, ok=False, message=exc.message))
                return ExecutionOutcome(statement=text, error=exc)

            changed = new_state is not self.state
            self.state = new_state
            if changed and self.on_change is not None:
                self.on_change(new_state)

        self._log(
            "statement_succeeded",
            {
                "statement": text,
                "message": result.message,
                "row_count": result.row_count,
                "changed": changed,
            },
        )
        self._remember(HistoryEntry(statement=text, ok=True, message=result.message))
        return ExecutionOutcome(statement=text, result=result)

    def refresh(self) -> None:
        """Pick up catalog changes published by other sessions."""

        with self.guard:
            self._adopt_shared_catalog()

    def _adopt_shared_catalog(self) -> None:
        if self.catalog_source is None:
            return
        catalog = self.catalog_source()
        if catalog is not self.state.catalog:
            self.state = replace(self.state, catalog=catalog)

    @property
    def selected_database(self) -> str | None:
        return self.state.session.selected_database

    def explorer(self) -> list[dict[str, Any]]:
        """Describe every database with its tables, marking the selected one."""

        entries: list[dict[str, Any]] = []
        for database in self.state.catalog.databases:
            entries.append(
                {
                    "name": database.name,
                    "selected": self.state.session.is_selected(database.name),
                    "tables": [
                        {
                            "name": table.name,
                            "columns": list(table.columns),
                            "row_count": len(table.rows),
                        }
                        for table in database.tables
                    ],
                }
            )
        return entries

    def _remember(self, entry: HistoryEntry) -> None:
        self.history.append(entry)
        if self.history_limit is not None and len(self.history) > self.history_limit:
            del self.history[: len(self.history) - self.history_limit]

    def _log(self, event: str, payload: dict[str, Any]) -> None:
        if self.logger is not None:
            self.logger.log_event(self.session_id, event, payload)


__all__ = ["ExecutionOutcome", "HistoryEntry", "Interpreter", "execute"]
