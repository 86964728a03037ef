"""In-memory catalog of databases, tables and rows.

Every structure here is immutable: helpers such as `Table.with_rows` or
`Catalog.replace_database` return a new object and leave the original intact.
Callers detect changes by identity, and a failed statement can never leave a
half-applied catalog behind.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Sequence, Union

Value = Union[str, int, float, bool, None]
Row = dict[str, Value]


def make_row(columns: Sequence[str], values: Mapping[str, Value]) -> Row:
    """Return a row keyed by exactly *columns*; absent columns become ``None``."""

    return {column: values.get(column) for column in columns}


@dataclass(frozen=True, slots=True)
class Table:
    name: str
    columns: tuple[str, ...]
    rows: tuple[Row, ...] = ()

    def has_column(self, name: str) -> bool:
        return name in self.columns

    def with_rows(self, rows: Iterable[Row]) -> Table:
        return replace(self, rows=tuple(make_row(self.columns, row) for row in rows))

    def to_snapshot(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "columns": list(self.columns),
            "data": [dict(row) for row in self.rows],
        }

    @classmethod
    def from_snapshot(cls, payload: Mapping[str, Any]) -> Table:
        columns = tuple(str(column) for column in payload.get("columns", []))
        rows = payload.get("data") or []
        return cls(
            name=str(payload["name"]),
            columns=columns,
            rows=tuple(make_row(columns, row) for row in rows if isinstance(row, Mapping)),
        )


@dataclass(frozen=True, slots=True)
class Database:
    name: str
    tables: tuple[Table, ...] = ()

    def find(self, table_name: str) -> Table | None:
        """Return the table named *table_name*, compared case-insensitively."""

        wanted = table_name.lower()
        for table in self.tables:
            if table.name.lower() == wanted:
                return table
        return None

    def add_table(self, table: Table) -> Database:
        return replace(self, tables=self.tables + (table,))

    def replace_table(self, table: Table) -> Database:
        wanted = table.name.lower()
        return replace(
            self,
            tables=tuple(table if t.name.lower() == wanted else t for t in self.tables),
        )

    def drop_table(self, table_name: str) -> Database:
        wanted = table_name.lower()
        return replace(self, tables=tuple(t for t in self.tables if t.name.lower() != wanted))

    def to_snapshot(self) -> dict[str, Any]:
        return {"name": self.name, "tables": [table.to_snapshot() for table in self.tables]}

    @classmethod
    def from_snapshot(cls, payload: Mapping[str, Any]) -> Database:
        tables = payload.get("tables") or []
        return cls(
            name=str(payload["name"]),
            tables=tuple(Table.from_snapshot(table) for table in tables),
        )


@dataclass(frozen=True, slots=True)
class Catalog:
    databases: tuple[Database, ...] = ()

    def find(self, database_name: str) -> Database | None:
        wanted = database_name.lower()
        for database in self.databases:
            if database.name.lower() == wanted:
                return database
        return None

    def names(self) -> list[str]:
        return [database.name for database in self.databases]

    def add_database(self, database: Database) -> Catalog:
        return replace(self, databases=self.databases + (database,))

    def replace_database(self, database: Database) -> Catalog:
        wanted = database.name.lower()
        return replace(
            self,
            databases=tuple(
                database if db.name.lower() == wanted else db for db in self.databases
            ),
        )

    def drop_database(self, database_name: str) -> Catalog:
        wanted = database_name.lower()
        return replace(
            self, databases=tuple(db for db in self.databases if db.name.lower() != wanted)
        )

    def to_snapshot(self) -> list[dict[str, Any]]:
        return [database.to_snapshot() for database in self.databases]

    @classmethod
    def from_snapshot(cls, payload: Iterable[Mapping[str, Any]] | None) -> Catalog:
        if not payload:
            return cls()
        return cls(databases=tuple(Database.from_snapshot(entry) for entry in payload))


@dataclass(frozen=True, slots=True)
class Session:
    selected_database: str | None = None

    def is_selected(self, database_name: str) -> bool:
        return (
            self.selected_database is not None
            and self.selected_database.lower() == database_name.lower()
        )


@dataclass(frozen=True, slots=True)
class InterpreterState:
    """The catalog and session threaded through every statement."""

    catalog: Catalog = field(default_factory=Catalog)
    session: Session = field(default_factory=Session)

    def current_database(self) -> Database | None:
        """Return the selected database, or ``None`` if nothing valid is selected."""

        name = self.session.selected_database
        if not name:
            return None
        return self.catalog.find(name)


__all__ = [
    "Catalog",
    "Database",
    "InterpreterState",
    "Row",
    "Session",
    "Table",
    "Value",
    "make_row",
]
