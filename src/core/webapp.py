"""FastAPI service exposing playground sessions over HTTP."""

from __future__ import annotations

import argparse
import logging
import threading
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Response
from pydantic import BaseModel, Field

from src.core.config import load_settings
from src.core.dependencies import PlaygroundDependencies, build_dependencies
from src.core.logging_utils import configure_logging, truncate_for_log
from src.engine.classifier import COMMAND_REFERENCE
from src.engine.interpreter import ExecutionOutcome, Interpreter


LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class SessionSlot:
    interpreter: Interpreter
    lock: threading.Lock = field(default_factory=threading.Lock)


class SessionManager:
    """Thread-safe registry; statements within one session run one at a time."""

    def __init__(self, dependencies: PlaygroundDependencies) -> None:
        self._dependencies = dependencies
        self._sessions: dict[str, SessionSlot] = {}
        self._lock = threading.Lock()

    def create(self) -> tuple[str, SessionSlot]:
        with self._lock:
            session_id = uuid4().hex[:8]
            while session_id in self._sessions:
                session_id = uuid4().hex[:8]
            slot = SessionSlot(interpreter=self._dependencies.create_interpreter(session_id))
            self._sessions[session_id] = slot
        return session_id, slot

    def get(self, session_id: str) -> SessionSlot | None:
        with self._lock:
            return self._sessions.get(session_id)

    def close(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def execute(self, session_id: str, statement: str) -> tuple[ExecutionOutcome, str | None]:
        """Run *statement* and return its outcome with the selection it left behind."""

        slot = self.get(session_id)
        if slot is None:
            raise KeyError(session_id)
        with slot.lock:
            outcome = slot.interpreter.execute(statement)
            return outcome, slot.interpreter.selected_database

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


class TableView(BaseModel):
    name: str
    columns: list[str]
    row_count: int


class DatabaseView(BaseModel):
    name: str
    selected: bool
    tables: list[TableView] = Field(default_factory=list)


class SessionResponse(BaseModel):
    session_id: str
    selected_database: str | None
    databases: list[DatabaseView]


class ExecuteRequest(BaseModel):
    statement: str = Field(..., min_length=1, description="A single SQL statement")


class ExecuteResponse(BaseModel):
    session_id: str
    statement: str
    message: str
    columns: list[str] | None = None
    rows: list[dict[str, Any]] | None = None
    row_count: int | None = None
    selected_database: str | None = None


class HistoryEntryPayload(BaseModel):
    statement: str
    ok: bool
    message: str


class HistoryResponse(BaseModel):
    session_id: str
    entries: list[HistoryEntryPayload]


class CommandPayload(BaseModel):
    command: str
    example: str
    description: str


class CommandsResponse(BaseModel):
    commands: list[CommandPayload]


def _session_view(session_id: str, interpreter: Interpreter) -> SessionResponse:
    interpreter.refresh()
    return SessionResponse(
        session_id=session_id,
        selected_database=interpreter.selected_database,
        databases=[DatabaseView(**entry) for entry in interpreter.explorer()],
    )


def create_app(
    config_path: str = "configs/dev.yaml",
    *,
    dependencies: PlaygroundDependencies | None = None,
) -> FastAPI:
    LOGGER.info("Initialising playground service with config '%s'", config_path)
    if dependencies is None:
        dependencies = build_dependencies(load_settings(config_path))
    session_manager = SessionManager(dependencies)

    app = FastAPI(title="SQL Playground", version="0.1.0")
    app.state.dependencies = dependencies
    app.state.session_manager = session_manager

    def _require_slot(session_id: str, action: str) -> SessionSlot:
        slot = session_manager.get(session_id)
        if slot is None:
            LOGGER.warning("%s failed: session_id=%s not found", action, session_id)
            raise HTTPException(status_code=404, detail="Session not found")
        return slot

    @app.get("/api/health")
    def healthcheck() -> dict[str, str]:  # pragma: no cover - trivial
        return {"status": "ok"}

    @app.get("/api/commands", response_model=CommandsResponse)
    def list_commands() -> CommandsResponse:
        return CommandsResponse(
            commands=[CommandPayload(**info.to_dict()) for info in COMMAND_REFERENCE]
        )

    @app.post("/api/session", response_model=SessionResponse)
    def start_session() -> SessionResponse:
        session_id, slot = session_manager.create()
        LOGGER.info("Session %s created (%s open)", session_id, len(session_manager))
        with slot.lock:
            return _session_view(session_id, slot.interpreter)

    @app.get("/api/session/{session_id}", response_model=SessionResponse)
    def describe_session(session_id: str) -> SessionResponse:
        slot = _require_slot(session_id, "Describe session")
        with slot.lock:
            return _session_view(session_id, slot.interpreter)

    @app.delete("/api/session/{session_id}", status_code=204)
    def close_session(session_id: str) -> Response:
        if not session_manager.close(session_id):
            LOGGER.warning("Close session failed: session_id=%s not found", session_id)
            raise HTTPException(status_code=404, detail="Session not found")
        LOGGER.info("Session %s closed", session_id)
        return Response(status_code=204)

    @app.post("/api/session/{session_id}/execute", response_model=ExecuteResponse)
    def execute_statement(session_id: str, payload: ExecuteRequest) -> ExecuteResponse:
        LOGGER.info(
            "Executing statement for session_id=%s statement=%s",
            session_id,
            truncate_for_log(payload.statement),
        )
        try:
            outcome, selected_database = session_manager.execute(session_id, payload.statement)
        except KeyError:
            LOGGER.warning("Execute failed: session_id=%s not found", session_id)
            raise HTTPException(status_code=404, detail="Session not found") from None

        if outcome.error is not None:
            LOGGER.info(
                "Statement rejected session_id=%s kind=%s", session_id, outcome.error.kind
            )
            raise HTTPException(status_code=400, detail=outcome.error.to_dict())
        if outcome.result is None:
            LOGGER.error("Statement produced no result session_id=%s", session_id)
            raise HTTPException(status_code=500, detail="Statement produced no result")

        result = outcome.result
        return ExecuteResponse(
            session_id=session_id,
            statement=outcome.statement,
            message=result.message,
            columns=result.columns,
            rows=result.rows,
            row_count=result.row_count,
            selected_database=selected_database,
        )

    @app.get("/api/session/{session_id}/history", response_model=HistoryResponse)
    def session_history(session_id: str) -> HistoryResponse:
        slot = _require_slot(session_id, "History")
        with slot.lock:
            entries = [HistoryEntryPayload(**entry.to_dict()) for entry in slot.interpreter.history]
        return HistoryResponse(session_id=session_id, entries=entries)

    return app


def main() -> None:
    parser = argparse.ArgumentParser(description="Launch the playground HTTP service")
    parser.add_argument("--config", default="configs/dev.yaml", help="Path to configuration file")
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind the server")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind the server")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    configure_logging(debug=args.debug)
    app = create_app(config_path=args.config)

    import uvicorn

    LOGGER.info("Starting uvicorn on %s:%s", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
