"""Statement event sinks for playground sessions."""

from __future__ import annotations

import json
import re
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

from src.core.logging_utils import truncate_for_log

_UNSAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9_-]+")


class StatementObservationSink(Protocol):
    """Receives one event per interpreter lifecycle step."""

    def log_event(self, session_id: str, event: str, payload: dict[str, Any]) -> None:  # pragma: no cover - interface
        ...


def statement_record(
    session_id: str,
    event: str,
    payload: dict[str, Any],
    *,
    statement_limit: int | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Flatten *payload* into one log record, dropping empty fields.

    Statement text is whitespace-collapsed and, when *statement_limit* is set,
    shortened so a pasted bulk INSERT does not bloat the log.
    """

    moment = now or datetime.now(UTC)
    timestamp = moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    record: dict[str, Any] = {"timestamp": timestamp, "session_id": session_id, "event": event}
    for key, value in payload.items():
        if value is None or key in record:
            continue
        if key == "statement" and isinstance(value, str) and statement_limit:
            value = truncate_for_log(value, statement_limit)
        record[key] = value
    return record


@dataclass(slots=True)
class JSONLStatementLogger(StatementObservationSink):
    """Appends statement events to one JSONL file per session under *base_dir*.

    A session's file is named after the moment its first event was logged
    (``20250101T120000123-<session>.jsonl``) and keeps that name for the
    lifetime of the logger, so files sort in the order sessions started.
    """

    base_dir: Path
    statement_limit: int | None = 2000
    _paths: dict[str, Path] = field(init=False, default_factory=dict)
    _lock: threading.Lock = field(init=False, default_factory=threading.Lock)

    def log_event(self, session_id: str, event: str, payload: dict[str, Any]) -> None:  # type: ignore[override]
        now = datetime.now(UTC)
        record = statement_record(
            session_id, event, payload, statement_limit=self.statement_limit, now=now
        )
        line = json.dumps(record, ensure_ascii=False, default=str)
        with self._lock:
            target = self.log_path(session_id, started=now)
            with target.open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")

    def log_path(self, session_id: str, *, started: datetime | None = None) -> Path:
        """Return the file used for *session_id*, choosing it on first use."""

        target = self._paths.get(session_id)
        if target is None:
            moment = started or datetime.now(UTC)
            safe_id = _UNSAFE_FILENAME_RE.sub("-", session_id.strip()) or "session"
            directory = Path(self.base_dir).expanduser()
            directory.mkdir(parents=True, exist_ok=True)
            target = directory / f"{moment.strftime('%Y%m%dT%H%M%S%f')[:-3]}-{safe_id}.jsonl"
            self._paths[session_id] = target
        return target


@dataclass(slots=True)
class MemoryStatementSink(StatementObservationSink):
    """Keeps events in a list; used by tests and embedded callers."""

    records: list[dict[str, Any]] = field(default_factory=list)

    def log_event(self, session_id: str, event: str, payload: dict[str, Any]) -> None:  # type: ignore[override]
        self.records.append(statement_record(session_id, event, payload))

    def events(self, session_id: str | None = None) -> list[str]:
        return [
            record["event"]
            for record in self.records
            if session_id is None or record["session_id"] == session_id
        ]
