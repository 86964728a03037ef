"""Statement classification by keyword prefix."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from src.engine.errors import UnsupportedCommand

SELECT = "select"
INSERT = "insert into"
UPDATE = "update"
DELETE = "delete from"
CREATE_DATABASE = "create database"
USE = "use"
CREATE_TABLE = "create table"
SHOW_DATABASES = "show databases"
SHOW_TABLES = "show tables"
DROP_DATABASE = "drop database"
DROP_TABLE = "drop table"

# First matching prefix wins.
STATEMENT_KINDS: tuple[str, ...] = (
    SELECT,
    INSERT,
    UPDATE,
    DELETE,
    CREATE_DATABASE,
    USE,
    CREATE_TABLE,
    SHOW_DATABASES,
    SHOW_TABLES,
    DROP_DATABASE,
    DROP_TABLE,
)

# SHOW statements are only recognised verbatim, terminator included.
_EXACT_FORMS = {
    SHOW_DATABASES: "show databases;",
    SHOW_TABLES: "show tables;",
}

TABLE_SCOPED_KINDS = frozenset(
    {SELECT, INSERT, UPDATE, DELETE, CREATE_TABLE, SHOW_TABLES, DROP_TABLE}
)


def classify(statement: str) -> str:
    """Return the statement kind for *statement* or raise `UnsupportedCommand`."""

    normalized = statement.strip().lower()
    for kind in STATEMENT_KINDS:
        if not normalized.startswith(kind):
            continue
        exact = _EXACT_FORMS.get(kind)
        if exact is not None and normalized != exact:
            break
        return kind
    raise UnsupportedCommand(_first_token(statement))


def _first_token(statement: str) -> str:
    parts = statement.strip().split()
    return parts[0] if parts else ""


@dataclass(frozen=True, slots=True)
class CommandInfo:
    command: str
    example: str
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "command": self.command,
            "example": self.example,
            "description": self.description,
        }


COMMAND_REFERENCE: tuple[CommandInfo, ...] = (
    CommandInfo("CREATE DATABASE", "CREATE DATABASE my_db;", "Creates a new database"),
    CommandInfo("USE", "USE my_db;", "Switches to specified database"),
    CommandInfo(
        "CREATE TABLE",
        "CREATE TABLE users (name, email, age);",
        "Creates a new table with specified columns",
    ),
    CommandInfo(
        "INSERT INTO",
        "INSERT INTO users (name, email) VALUES ('John', 'john@example.com');",
        "Inserts new records into a table",
    ),
    CommandInfo("SELECT", "SELECT * FROM users;", "Retrieves data from a table"),
    CommandInfo(
        "UPDATE",
        "UPDATE users SET name = 'Jane' WHERE email = 'john@example.com';",
        "Modifies existing records",
    ),
    CommandInfo(
        "DELETE FROM",
        "DELETE FROM users WHERE name = 'John';",
        "Removes records from a table",
    ),
    CommandInfo("SHOW DATABASES", "SHOW DATABASES;", "Lists all databases"),
    CommandInfo("SHOW TABLES", "SHOW TABLES;", "Lists all tables in current database"),
    CommandInfo("DROP DATABASE", "DROP DATABASE my_db;", "Deletes a database"),
    CommandInfo("DROP TABLE", "DROP TABLE users;", "Deletes a table"),
)


__all__ = [
    "COMMAND_REFERENCE",
    "CREATE_DATABASE",
    "CREATE_TABLE",
    "CommandInfo",
    "DELETE",
    "DROP_DATABASE",
    "DROP_TABLE",
    "INSERT",
    "SELECT",
    "SHOW_DATABASES",
    "SHOW_TABLES",
    "STATEMENT_KINDS",
    "TABLE_SCOPED_KINDS",
    "UPDATE",
    "USE",
    "classify",
]
