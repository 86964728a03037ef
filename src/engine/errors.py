"""Typed failures raised while interpreting a single statement."""

from __future__ import annotations

from typing import Any


class StatementError(Exception):
    """Base class for every failure the interpreter reports to the user."""

    kind = "StatementError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message}


class UnsupportedCommand(StatementError):
    kind = "UnsupportedCommand"

    def __init__(self, token: str) -> None:
        super().__init__(f"Unsupported SQL command: {token}")
        self.token = token


class StatementSyntaxError(StatementError):
    kind = "SyntaxError"

    def __init__(self, message: str, fragment: str | None = None) -> None:
        text = message if not fragment else f"{message} near '{fragment}'"
        super().__init__(text)
        self.fragment = fragment


class NoDatabaseSelected(StatementError):
    kind = "NoDatabaseSelected"

    def __init__(self) -> None:
        super().__init__("No database selected. Use 'USE database_name;' first.")


class TableNotFound(StatementError):
    kind = "TableNotFound"

    def __init__(self, table: str, database: str, message: str | None = None) -> None:
        super().__init__(message or f"Table '{table}' not found in database '{database}'")
        self.table = table
        self.database = database


class TableAlreadyExists(StatementError):
    kind = "TableAlreadyExists"

    def __init__(self, table: str, database: str) -> None:
        super().__init__(f"Table '{table}' already exists in database '{database}'")
        self.table = table
        self.database = database


class UnknownColumn(StatementError):
    kind = "UnknownColumn"

    def __init__(self, columns: list[str], table: str | None = None) -> None:
        if len(columns) == 1 and table is not None:
            message = f"Column '{columns[0]}' does not exist in table '{table}'"
        else:
            message = f"Invalid columns: {', '.join(columns)}"
        super().__init__(message)
        self.columns = list(columns)
        self.table = table


class ArityMismatch(StatementError):
    kind = "ArityMismatch"

    def __init__(self, row_index: int, expected: int, actual: int) -> None:
        super().__init__(
            f"Column count doesn't match value count in row {row_index + 1}"
            f" (expected {expected}, got {actual})"
        )
        self.row_index = row_index
        self.expected = expected
        self.actual = actual


class DatabaseAlreadyExists(StatementError):
    kind = "DatabaseAlreadyExists"

    def __init__(self, database: str) -> None:
        super().__init__(f"Database '{database}' already exists")
        self.database = database


class DatabaseNotFound(StatementError):
    kind = "DatabaseNotFound"

    def __init__(self, database: str, message: str | None = None) -> None:
        super().__init__(message or f"Database '{database}' not found")
        self.database = database


class UnsupportedOperator(StatementError):
    kind = "UnsupportedOperator"

    def __init__(self, operator: str) -> None:
        super().__init__(f"Unsupported operator: {operator}")
        self.operator = operator


__all__ = [
    "ArityMismatch",
    "DatabaseAlreadyExists",
    "DatabaseNotFound",
    "NoDatabaseSelected",
    "StatementError",
    "StatementSyntaxError",
    "TableAlreadyExists",
    "TableNotFound",
    "UnknownColumn",
    "UnsupportedCommand",
    "UnsupportedOperator",
]
