"""Apply validated statements to an `InterpreterState`.

Handlers never mutate their input: each returns a fresh state (or the same
object for read-only statements) together with a `StatementResult`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Any, Callable

from src.engine.catalog import (
    Database,
    InterpreterState,
    Row,
    Session,
    Table,
    Value,
    make_row,
)
from src.engine.errors import NoDatabaseSelected, UnsupportedOperator
from src.engine.parser import (
    CreateDatabaseStatement,
    CreateTableStatement,
    DeleteStatement,
    DropDatabaseStatement,
    DropTableStatement,
    InsertStatement,
    Predicate,
    SelectStatement,
    ShowDatabasesStatement,
    ShowTablesStatement,
    Statement,
    UpdateStatement,
    UseStatement,
)

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True, slots=True)
class StatementResult:
    message: str
    columns: list[str] | None = None
    rows: list[Row] | None = None
    row_count: int | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"message": self.message}
        if self.columns is not None:
            payload["columns"] = list(self.columns)
        if self.rows is not None:
            payload["rows"] = [dict(row) for row in self.rows]
        if self.row_count is not None:
            payload["row_count"] = self.row_count
        return payload


def apply(statement: Statement, state: InterpreterState) -> tuple[InterpreterState, StatementResult]:
    """Execute an already validated *statement* against *state*."""

    handler = _HANDLERS[type(statement)]
    return handler(statement, state)


def _current(state: InterpreterState) -> Database:
    database = state.current_database()
    if database is None:
        raise NoDatabaseSelected()
    return database


def _table(state: InterpreterState, name: str) -> tuple[Database, Table]:
    database = _current(state)
    table = database.find(name)
    if table is None:  # pragma: no cover - guarded by the validator
        raise KeyError(name)
    return database, table


def _store(state: InterpreterState, database: Database, table: Table) -> InterpreterState:
    updated = database.replace_table(table)
    return replace(state, catalog=state.catalog.replace_database(updated))


def _select(statement: SelectStatement, state: InterpreterState):
    _, table = _table(state, statement.table)
    columns = list(statement.columns) if statement.columns is not None else list(table.columns)
    rows = [{column: row.get(column) for column in columns} for row in table.rows]
    return state, StatementResult(
        message=f"Retrieved {len(rows)} rows from {statement.table}",
        columns=columns,
        rows=rows,
        row_count=len(rows),
    )


def _insert(statement: InsertStatement, state: InterpreterState):
    database, table = _table(state, statement.table)
    columns = statement.columns if statement.columns is not None else table.columns
    new_rows = [make_row(table.columns, dict(zip(columns, values))) for values in statement.rows]
    updated = table.with_rows(table.rows + tuple(new_rows))
    return _store(state, database, updated), StatementResult(
        message=f"{len(new_rows)} rows inserted into {statement.table}",
        row_count=len(new_rows),
    )


def _update(statement: UpdateStatement, state: InterpreterState):
    database, table = _table(state, statement.table)
    where = statement.where
    affected = 0
    rows: list[Row] = []
    for row in table.rows:
        if row.get(where.column) == where.value:
            changed = dict(row)
            for column, value in statement.assignments:
                changed[column] = value
            rows.append(changed)
            affected += 1
        else:
            rows.append(row)
    return _store(state, database, table.with_rows(rows)), StatementResult(
        message=f"Updated {affected} rows in {statement.table}",
        row_count=affected,
    )


def _delete(statement: DeleteStatement, state: InterpreterState):
    database, table = _table(state, statement.table)
    kept = [row for row in table.rows if keep_row(row.get(statement.where.column), statement.where)]
    deleted = len(table.rows) - len(kept)
    return _store(state, database, table.with_rows(kept)), StatementResult(
        message=f"Deleted {deleted} rows from {statement.table}",
        row_count=deleted,
    )


def keep_row(stored: Value, predicate: Predicate) -> bool:
    """Return ``True`` when a row survives ``DELETE ... WHERE predicate``.

    The numeric operators negate the comparison rather than testing for a match,
    so a value that does not parse as an integer compares false and the row is
    kept.
    """

    operator = predicate.operator
    if operator == "=":
        return not _loosely_equal(stored, predicate.value)
    if operator == "!=":
        return _loosely_equal(stored, predicate.value)

    left = parse_int(stored)
    right = parse_int(predicate.value)
    if operator == ">":
        satisfied = left is not None and right is not None and left > right
    elif operator == "<":
        satisfied = left is not None and right is not None and left < right
    elif operator == ">=":
        satisfied = left is not None and right is not None and left >= right
    elif operator == "<=":
        satisfied = left is not None and right is not None and left <= right
    else:
        raise UnsupportedOperator(operator)
    return not satisfied


def parse_int(value: Value) -> int | None:
    """Read a leading integer the way a browser's ``parseInt`` does."""

    if value is None or isinstance(value, bool):
        return None
    match = _LEADING_INT_RE.match(str(value))
    if match is None:
        return None
    return int(match.group(1))


def _loosely_equal(stored: Value, value: str) -> bool:
    if stored is None:
        return False
    if isinstance(stored, (int, float)) and not isinstance(stored, bool):
        try:
            return float(value) == stored
        except ValueError:
            return False
    return str(stored) == value


def _create_database(statement: CreateDatabaseStatement, state: InterpreterState):
    catalog = state.catalog.add_database(Database(name=statement.name))
    return replace(state, catalog=catalog), StatementResult(
        message=f"Database '{statement.name}' created successfully"
    )


def _use(statement: UseStatement, state: InterpreterState):
    database = state.catalog.find(statement.name)
    if database is None:  # pragma: no cover - guarded by the validator
        raise KeyError(statement.name)
    return replace(state, session=Session(selected_database=database.name)), StatementResult(
        message=f"Using database '{database.name}'"
    )


def _drop_database(statement: DropDatabaseStatement, state: InterpreterState):
    catalog = state.catalog.drop_database(statement.name)
    session = Session() if state.session.is_selected(statement.name) else state.session
    return InterpreterState(catalog=catalog, session=session), StatementResult(
        message=f"Database '{statement.name}' dropped successfully"
    )


def _create_table(statement: CreateTableStatement, state: InterpreterState):
    database = _current(state)
    updated = database.add_table(Table(name=statement.table, columns=statement.columns))
    return replace(state, catalog=state.catalog.replace_database(updated)), StatementResult(
        message=f"Table '{statement.table}' created in database '{database.name}'"
    )


def _drop_table(statement: DropTableStatement, state: InterpreterState):
    database = _current(state)
    updated = database.drop_table(statement.table)
    return replace(state, catalog=state.catalog.replace_database(updated)), StatementResult(
        message=f"Table '{statement.table}' dropped from '{database.name}'"
    )


def _show_databases(statement: ShowDatabasesStatement, state: InterpreterState):
    names = state.catalog.names()
    listing = "\n".join(names)
    return state, StatementResult(message=f"Databases:\n{listing}", row_count=len(names))


def _show_tables(statement: ShowTablesStatement, state: InterpreterState):
    database = _current(state)
    if not database.tables:
        return state, StatementResult(
            message=f"No tables in database '{database.name}'", row_count=0
        )
    listing = "\n".join(table.name for table in database.tables)
    return state, StatementResult(
        message=f"Tables in '{database.name}':\n{listing}",
        row_count=len(database.tables),
    )


_HANDLERS: dict[type, Callable[[Any, InterpreterState], tuple[InterpreterState, StatementResult]]] = {
    SelectStatement: _select,
    InsertStatement: _insert,
    UpdateStatement: _update,
    DeleteStatement: _delete,
    CreateDatabaseStatement: _create_database,
    UseStatement: _use,
    DropDatabaseStatement: _drop_database,
    CreateTableStatement: _create_table,
    DropTableStatement: _drop_table,
    ShowDatabasesStatement: _show_databases,
    ShowTablesStatement: _show_tables,
}


__all__ = ["StatementResult", "apply", "keep_row", "parse_int"]
