"""Semantic checks that run between parsing and execution."""

from __future__ import annotations

from src.engine.catalog import Database, InterpreterState, Table
from src.engine.errors import (
    ArityMismatch,
    DatabaseAlreadyExists,
    DatabaseNotFound,
    NoDatabaseSelected,
    TableAlreadyExists,
    TableNotFound,
    UnknownColumn,
)
from src.engine.parser import (
    CreateDatabaseStatement,
    CreateTableStatement,
    DeleteStatement,
    DropDatabaseStatement,
    DropTableStatement,
    InsertStatement,
    SelectStatement,
    ShowTablesStatement,
    Statement,
    UpdateStatement,
    UseStatement,
)

_TABLE_SCOPED = (
    SelectStatement,
    InsertStatement,
    UpdateStatement,
    DeleteStatement,
    CreateTableStatement,
    ShowTablesStatement,
    DropTableStatement,
)
_TABLE_TARGETED = (
    SelectStatement,
    InsertStatement,
    UpdateStatement,
    DeleteStatement,
    DropTableStatement,
)


def validate(statement: Statement, state: InterpreterState) -> None:
    """Raise the first `StatementError` that *statement* triggers against *state*."""

    if isinstance(statement, _TABLE_SCOPED):
        database = state.current_database()
        if database is None:
            raise NoDatabaseSelected()
        if isinstance(statement, CreateTableStatement):
            if database.find(statement.table) is not None:
                raise TableAlreadyExists(statement.table, database.name)
            return
        if isinstance(statement, _TABLE_TARGETED):
            table = _require_table(database, statement.table, statement)
            _check_columns(statement, table)
            if isinstance(statement, InsertStatement):
                _check_arity(statement, table)
        return

    if isinstance(statement, CreateDatabaseStatement):
        if state.catalog.find(statement.name) is not None:
            raise DatabaseAlreadyExists(statement.name)
    elif isinstance(statement, DropDatabaseStatement):
        if state.catalog.find(statement.name) is None:
            raise DatabaseNotFound(
                statement.name, f"Database '{statement.name}' does not exist"
            )
    elif isinstance(statement, UseStatement):
        if state.catalog.find(statement.name) is None:
            raise DatabaseNotFound(statement.name)


def _require_table(database: Database, name: str, statement: Statement) -> Table:
    table = database.find(name)
    if table is not None:
        return table
    if isinstance(statement, DropTableStatement):
        raise TableNotFound(
            name, database.name, f"Table '{name}' does not exist in '{database.name}'"
        )
    raise TableNotFound(name, database.name)


def referenced_columns(statement: Statement) -> list[str]:
    """Return every column name *statement* refers to, in order of appearance."""

    if isinstance(statement, SelectStatement):
        return list(statement.columns or ())
    if isinstance(statement, InsertStatement):
        return list(statement.columns or ())
    if isinstance(statement, UpdateStatement):
        return [column for column, _ in statement.assignments] + [statement.where.column]
    if isinstance(statement, DeleteStatement):
        return [statement.where.column]
    return []


def _check_columns(statement: Statement, table: Table) -> None:
    invalid: list[str] = []
    for column in referenced_columns(statement):
        if not table.has_column(column) and column not in invalid:
            invalid.append(column)
    if not invalid:
        return
    if isinstance(statement, DeleteStatement):
        raise UnknownColumn(invalid, table=table.name)
    raise UnknownColumn(invalid)


def _check_arity(statement: InsertStatement, table: Table) -> None:
    expected = len(statement.columns) if statement.columns is not None else len(table.columns)
    for index, values in enumerate(statement.rows):
        if len(values) != expected:
            raise ArityMismatch(index, expected, len(values))


__all__ = ["referenced_columns", "validate"]
