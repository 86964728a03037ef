"""Tests for the per-statement parsers."""

from __future__ import annotations

import pytest

from src.engine import classifier
from src.engine.errors import StatementSyntaxError, UnsupportedOperator
from src.engine.parser import (
    CreateDatabaseStatement,
    CreateTableStatement,
    DeleteStatement,
    DropDatabaseStatement,
    DropTableStatement,
    InsertStatement,
    Predicate,
    SelectStatement,
    ShowTablesStatement,
    UpdateStatement,
    UseStatement,
    parse,
    parse_create_database,
    parse_create_table,
    parse_delete,
    parse_insert,
    parse_select,
    parse_update,
)


def test_select_star_projects_everything() -> None:
    assert parse_select("SELECT * FROM users;") == SelectStatement(table="users", columns=None)


def test_select_column_list_keeps_casing() -> None:
    statement = parse_select("select name, Email from Users")

    assert statement.columns == ("name", "Email")
    assert statement.table == "Users"


def test_select_without_table_is_rejected() -> None:
    with pytest.raises(StatementSyntaxError, match="Please specify a table name"):
        parse_select("SELECT * FROM")


def test_select_ignores_clauses_after_the_table() -> None:
    for statement in (
        "SELECT * FROM users WHERE age >= '1';",
        "SELECT name FROM users ORDER BY name DESC LIMIT 5",
        "select * from users;;",
    ):
        assert parse_select(statement).table == "users"

    assert parse_select("SELECT name FROM users WHERE x = 1").columns == ("name",)


def test_insert_reads_multiple_tuples() -> None:
    statement = parse_insert(
        "INSERT INTO users (name, email) VALUES ('Ana','a@x.com'), ( 'Bo' , b@x.com );"
    )

    assert statement == InsertStatement(
        table="users",
        columns=("name", "email"),
        rows=(("Ana", "a@x.com"), ("Bo", "b@x.com")),
    )


def test_insert_quoted_values_may_contain_commas() -> None:
    statement = parse_insert("INSERT INTO notes (body, tag) VALUES ('a, b', c);")

    assert statement.rows == (("a, b", "c"),)


def test_insert_without_column_list_is_positional() -> None:
    statement = parse_insert("insert into users values ('Ana', 'a@x.com');")

    assert statement.columns is None
    assert statement.rows == (("Ana", "a@x.com"),)


def test_insert_requires_terminator() -> None:
    with pytest.raises(StatementSyntaxError, match="Invalid INSERT syntax"):
        parse_insert("INSERT INTO users (name) VALUES ('Ana')")


def test_update_reads_assignments_and_predicate() -> None:
    statement = parse_update(
        "UPDATE users SET name = 'Jane', email = j@x.com WHERE email = 'a@x.com';"
    )

    assert statement == UpdateStatement(
        table="users",
        assignments=(("name", "Jane"), ("email", "j@x.com")),
        where=Predicate(column="email", operator="=", value="a@x.com"),
    )


def test_update_only_supports_equality() -> None:
    with pytest.raises(UnsupportedOperator) as excinfo:
        parse_update("UPDATE users SET name = 'x' WHERE age > 3;")

    assert excinfo.value.operator == ">"


def test_update_requires_where_clause() -> None:
    with pytest.raises(StatementSyntaxError):
        parse_update("UPDATE users SET name = 'x';")


def test_delete_reads_comparison() -> None:
    statement = parse_delete("DELETE FROM people WHERE age >= 30;")

    assert statement == DeleteStatement(
        table="people", where=Predicate(column="age", operator=">=", value="30")
    )


@pytest.mark.parametrize("operator", ["==", "<>", "=<"])
def test_delete_rejects_unknown_operators(operator: str) -> None:
    with pytest.raises(UnsupportedOperator, match=f"Unsupported operator: {operator}"):
        parse_delete(f"DELETE FROM people WHERE age {operator} 3;")


def test_create_table_keeps_first_word_of_each_definition() -> None:
    statement = parse_create_table(
        "CREATE TABLE items (id INT PRIMARY KEY, price decimal(10,2), name varchar(20));"
    )

    assert statement == CreateTableStatement(table="items", columns=("id", "price", "name"))


def test_create_table_without_space_before_paren() -> None:
    assert parse_create_table("CREATE TABLE users(name, email)").table == "users"


def test_create_table_rejects_duplicate_columns() -> None:
    with pytest.raises(StatementSyntaxError, match="Duplicate column"):
        parse_create_table("CREATE TABLE users (name, name);")


def test_create_database_requires_a_name() -> None:
    assert parse_create_database("CREATE DATABASE shop;") == CreateDatabaseStatement(name="shop")
    with pytest.raises(StatementSyntaxError, match="Invalid database name"):
        parse_create_database("CREATE DATABASE ;")


@pytest.mark.parametrize(
    ("statement", "expected"),
    [
        ("USE Shop", UseStatement(name="Shop")),
        ("DROP DATABASE shop;", DropDatabaseStatement(name="shop")),
        ("DROP TABLE users;", DropTableStatement(table="users")),
        ("SHOW TABLES;", ShowTablesStatement()),
    ],
)
def test_parse_dispatches_on_kind(statement: str, expected: object) -> None:
    assert parse(statement, classifier.classify(statement)) == expected
