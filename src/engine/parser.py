"""Recursive-descent parsers, one per statement kind.

Each parser consumes the token stream produced by `tokenize` and returns a
frozen statement record. Keywords are matched case-insensitively while names
and values keep the casing they were typed with.

Terminators follow the playground's historical rules: INSERT, UPDATE and
DELETE must end with ``;`` whereas SELECT and the database/table DDL accept it
optionally. SELECT ignores whatever follows its table name (WHERE, ORDER BY,
LIMIT and so on) and always returns every row; every other statement rejects
anything left over after its final clause.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Union

from src.engine import classifier
from src.engine.errors import StatementSyntaxError, UnsupportedOperator
from src.engine.tokenizer import (
    COMMA,
    EOF,
    LPAREN,
    OP,
    RPAREN,
    SEMI,
    STAR,
    STRING,
    WORD,
    Token,
    tokenize,
)

COMPARISON_OPERATORS = ("=", "!=", ">", "<", ">=", "<=")

_IDENTIFIER_RE = re.compile(r"^\w+$")


@dataclass(frozen=True, slots=True)
class Predicate:
    column: str
    operator: str
    value: str


@dataclass(frozen=True, slots=True)
class SelectStatement:
    table: str
    columns: tuple[str, ...] | None  # None projects every column


@dataclass(frozen=True, slots=True)
class InsertStatement:
    table: str
    columns: tuple[str, ...] | None  # None maps values positionally
    rows: tuple[tuple[str, ...], ...]


@dataclass(frozen=True, slots=True)
class UpdateStatement:
    table: str
    assignments: tuple[tuple[str, str], ...]
    where: Predicate


@dataclass(frozen=True, slots=True)
class DeleteStatement:
    table: str
    where: Predicate


@dataclass(frozen=True, slots=True)
class CreateDatabaseStatement:
    name: str


@dataclass(frozen=True, slots=True)
class UseStatement:
    name: str


@dataclass(frozen=True, slots=True)
class DropDatabaseStatement:
    name: str


@dataclass(frozen=True, slots=True)
class CreateTableStatement:
    table: str
    columns: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class DropTableStatement:
    table: str


@dataclass(frozen=True, slots=True)
class ShowDatabasesStatement:
    pass


@dataclass(frozen=True, slots=True)
class ShowTablesStatement:
    pass


Statement = Union[
    SelectStatement,
    InsertStatement,
    UpdateStatement,
    DeleteStatement,
    CreateDatabaseStatement,
    UseStatement,
    DropDatabaseStatement,
    CreateTableStatement,
    DropTableStatement,
    ShowDatabasesStatement,
    ShowTablesStatement,
]


class _Cursor:
    """Walks a token list on behalf of a single parser."""

    def __init__(self, statement: str, label: str) -> None:
        self.tokens = tokenize(statement)
        self.index = 0
        self.label = label

    def peek(self) -> Token:
        return self.tokens[self.index]

    def advance(self) -> Token:
        token = self.tokens[self.index]
        if token.kind != EOF:
            self.index += 1
        return token

    def check(self, kind: str) -> bool:
        return self.peek().kind == kind

    def accept(self, kind: str) -> Token | None:
        if self.check(kind):
            return self.advance()
        return None

    def fail(self, message: str | None = None) -> StatementSyntaxError:
        token = self.peek()
        fragment = token.text if token.kind != EOF else "end of statement"
        return StatementSyntaxError(message or f"Invalid {self.label} syntax", fragment)

    def expect(self, kind: str, message: str | None = None) -> Token:
        if not self.check(kind):
            raise self.fail(message)
        return self.advance()

    def keyword(self, *words: str, message: str | None = None) -> None:
        for word in words:
            if not self.peek().is_keyword(word):
                raise self.fail(message)
            self.advance()

    def identifier(self, message: str | None = None) -> str:
        token = self.peek()
        if token.kind != WORD or not _IDENTIFIER_RE.match(token.text):
            raise self.fail(message)
        self.advance()
        return token.text

    def identifier_list(self) -> tuple[str, ...]:
        names = [self.identifier()]
        while self.accept(COMMA):
            names.append(self.identifier())
        return tuple(names)

    def value(self, stop: tuple[str, ...] = ()) -> str:
        """Read one literal: a quoted string, bare words, or nothing at all."""

        token = self.peek()
        if token.kind == STRING:
            self.advance()
            return token.value
        if token.kind in (COMMA, RPAREN):
            return ""
        if token.kind != WORD:
            raise self.fail()
        words = []
        while self.check(WORD) and not any(self.peek().is_keyword(word) for word in stop):
            words.append(self.advance().text)
        if not words:
            raise self.fail()
        return " ".join(words)

    def operator(self) -> str:
        return self.expect(OP).text

    def skip_rest(self) -> None:
        self.index = len(self.tokens) - 1

    def finish(self, *, terminator: bool) -> None:
        if terminator:
            self.expect(SEMI)
        else:
            self.accept(SEMI)
        if not self.check(EOF):
            raise self.fail()


def parse_select(statement: str) -> SelectStatement:
    cursor = _Cursor(statement, "SELECT")
    cursor.keyword("select")
    columns: tuple[str, ...] | None
    if cursor.accept(STAR):
        columns = None
    else:
        columns = cursor.identifier_list()
    missing_table = "Invalid SELECT query. Please specify a table name."
    cursor.keyword("from", message=missing_table)
    table = cursor.identifier(missing_table)
    cursor.skip_rest()
    return SelectStatement(table=table, columns=columns)


def parse_insert(statement: str) -> InsertStatement:
    cursor = _Cursor(statement, "INSERT")
    cursor.keyword("insert", "into")
    table = cursor.identifier()
    columns: tuple[str, ...] | None = None
    if cursor.accept(LPAREN):
        columns = cursor.identifier_list()
        cursor.expect(RPAREN)
    cursor.keyword("values")
    rows = [_value_tuple(cursor)]
    while cursor.accept(COMMA):
        rows.append(_value_tuple(cursor))
    cursor.finish(terminator=True)
    return InsertStatement(table=table, columns=columns, rows=tuple(rows))


def _value_tuple(cursor: _Cursor) -> tuple[str, ...]:
    cursor.expect(LPAREN)
    values = [cursor.value()]
    while cursor.accept(COMMA):
        values.append(cursor.value())
    cursor.expect(RPAREN)
    return tuple(values)


def parse_update(statement: str) -> UpdateStatement:
    cursor = _Cursor(statement, "UPDATE")
    cursor.keyword("update")
    table = cursor.identifier()
    cursor.keyword("set")
    assignments = [_assignment(cursor)]
    while cursor.accept(COMMA):
        assignments.append(_assignment(cursor))
    cursor.keyword("where")
    column = cursor.identifier()
    operator = cursor.operator()
    if operator != "=":
        raise UnsupportedOperator(operator)
    value = cursor.value()
    cursor.finish(terminator=True)
    return UpdateStatement(
        table=table,
        assignments=tuple(assignments),
        where=Predicate(column=column, operator=operator, value=value),
    )


def _assignment(cursor: _Cursor) -> tuple[str, str]:
    column = cursor.identifier()
    if cursor.operator() != "=":
        raise cursor.fail()
    return column, cursor.value(stop=("where",))


def parse_delete(statement: str) -> DeleteStatement:
    cursor = _Cursor(statement, "DELETE")
    cursor.keyword("delete", "from")
    table = cursor.identifier()
    cursor.keyword("where")
    column = cursor.identifier()
    operator = cursor.operator()
    if operator not in COMPARISON_OPERATORS:
        raise UnsupportedOperator(operator)
    value = cursor.value()
    cursor.finish(terminator=True)
    return DeleteStatement(table=table, where=Predicate(column=column, operator=operator, value=value))


def parse_create_database(statement: str) -> CreateDatabaseStatement:
    cursor = _Cursor(statement, "CREATE DATABASE")
    cursor.keyword("create", "database")
    name = cursor.identifier("Invalid database name")
    cursor.finish(terminator=False)
    return CreateDatabaseStatement(name=name)


def parse_use(statement: str) -> UseStatement:
    cursor = _Cursor(statement, "USE")
    cursor.keyword("use")
    name = cursor.identifier("Please specify a database name")
    cursor.finish(terminator=False)
    return UseStatement(name=name)


def parse_drop_database(statement: str) -> DropDatabaseStatement:
    cursor = _Cursor(statement, "DROP DATABASE")
    cursor.keyword("drop", "database")
    name = cursor.identifier("Please specify a database name")
    cursor.finish(terminator=False)
    return DropDatabaseStatement(name=name)


def parse_create_table(statement: str) -> CreateTableStatement:
    cursor = _Cursor(statement, "CREATE TABLE")
    cursor.keyword("create", "table")
    table = cursor.identifier("Invalid table name")
    cursor.expect(LPAREN, "Invalid table definition")
    columns = [_column_definition(cursor)]
    while cursor.accept(COMMA):
        columns.append(_column_definition(cursor))
    cursor.expect(RPAREN, "Invalid table definition")
    cursor.finish(terminator=False)

    seen: set[str] = set()
    for column in columns:
        if column in seen:
            raise StatementSyntaxError(f"Duplicate column '{column}' in table definition")
        seen.add(column)
    return CreateTableStatement(table=table, columns=tuple(columns))


def _column_definition(cursor: _Cursor) -> str:
    """Keep the column name and skip any type or constraint words after it."""

    name = cursor.identifier("Invalid table definition")
    depth = 0
    while True:
        token = cursor.peek()
        if token.kind == EOF:
            raise cursor.fail("Invalid table definition")
        if depth == 0 and token.kind in (COMMA, RPAREN):
            return name
        if token.kind == LPAREN:
            depth += 1
        elif token.kind == RPAREN:
            depth -= 1
        cursor.advance()


def parse_drop_table(statement: str) -> DropTableStatement:
    cursor = _Cursor(statement, "DROP TABLE")
    cursor.keyword("drop", "table")
    table = cursor.identifier("Please specify a table name")
    cursor.finish(terminator=False)
    return DropTableStatement(table=table)


def parse_show_databases(statement: str) -> ShowDatabasesStatement:
    cursor = _Cursor(statement, "SHOW DATABASES")
    cursor.keyword("show", "databases")
    cursor.finish(terminator=True)
    return ShowDatabasesStatement()


def parse_show_tables(statement: str) -> ShowTablesStatement:
    cursor = _Cursor(statement, "SHOW TABLES")
    cursor.keyword("show", "tables")
    cursor.finish(terminator=True)
    return ShowTablesStatement()


PARSERS: dict[str, Callable[[str], Statement]] = {
    classifier.SELECT: parse_select,
    classifier.INSERT: parse_insert,
    classifier.UPDATE: parse_update,
    classifier.DELETE: parse_delete,
    classifier.CREATE_DATABASE: parse_create_database,
    classifier.USE: parse_use,
    classifier.CREATE_TABLE: parse_create_table,
    classifier.SHOW_DATABASES: parse_show_databases,
    classifier.SHOW_TABLES: parse_show_tables,
    classifier.DROP_DATABASE: parse_drop_database,
    classifier.DROP_TABLE: parse_drop_table,
}


def parse(statement: str, kind: str) -> Statement:
    """Parse *statement* with the parser registered for *kind*."""

    return PARSERS[kind](statement)


__all__ = [
    "COMPARISON_OPERATORS",
    "CreateDatabaseStatement",
    "CreateTableStatement",
    "DeleteStatement",
    "DropDatabaseStatement",
    "DropTableStatement",
    "InsertStatement",
    "PARSERS",
    "Predicate",
    "SelectStatement",
    "ShowDatabasesStatement",
    "ShowTablesStatement",
    "Statement",
    "UpdateStatement",
    "UseStatement",
    "parse",
]
