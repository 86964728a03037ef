"""Key-value store persisted as a single JSON object on disk.

The file is read once on construction (and again on `refresh`) and rewritten
in full, under a lock, on every change. This mirrors browser local storage:
values are strings and the whole mapping is small enough to keep in memory.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class JSONFileKeyValueStore:
    """Store string values under string keys in a JSON file."""

    path: str | Path
    _values: dict[str, str] = field(init=False, default_factory=dict)
    _path: Path = field(init=False)
    _lock: threading.RLock = field(init=False, default_factory=threading.RLock)

    def __post_init__(self) -> None:
        self._path = Path(self.path).expanduser()
        self.refresh()

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value
            self._write()

    def delete(self, key: str) -> None:
        with self._lock:
            if self._values.pop(key, None) is not None:
                self._write()

    def keys(self) -> list[str]:
        return list(self._values)

    def refresh(self) -> None:
        """Reload the stored mapping from disk; a missing file means empty."""

        with self._lock:
            if not self._path.exists():
                self._values = {}
                return
            with self._path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
            if not isinstance(payload, dict):
                raise ValueError(f"Storage file must contain a JSON object: {self._path}")
            self._values = {str(key): str(value) for key, value in payload.items()}

    def _write(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("w", encoding="utf-8") as handle:
            json.dump(self._values, handle, ensure_ascii=False, indent=2)
        LOGGER.debug("Wrote %s key(s) to %s", len(self._values), self._path)
