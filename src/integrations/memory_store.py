"""Dictionary-backed key-value store for tests and throwaway sessions."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class InMemoryKeyValueStore:
    """Simple mapping-based store that satisfies the `KeyValueStore` protocol."""

    values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)
