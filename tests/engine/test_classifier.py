"""Tests for statement classification."""

from __future__ import annotations

import pytest

from src.engine import classifier
from src.engine.classifier import COMMAND_REFERENCE, classify
from src.engine.errors import UnsupportedCommand


@pytest.mark.parametrize(
    ("statement", "kind"),
    [
        ("SELECT * FROM users;", classifier.SELECT),
        ("  insert into users (a) values (1);", classifier.INSERT),
        ("Update users SET a = 1 WHERE b = 2;", classifier.UPDATE),
        ("DELETE FROM users WHERE a = 1;", classifier.DELETE),
        ("CREATE DATABASE shop;", classifier.CREATE_DATABASE),
        ("use shop;", classifier.USE),
        ("CREATE TABLE users (a, b);", classifier.CREATE_TABLE),
        ("SHOW DATABASES;", classifier.SHOW_DATABASES),
        ("show tables;  ", classifier.SHOW_TABLES),
        ("DROP DATABASE shop;", classifier.DROP_DATABASE),
        ("Drop Table users;", classifier.DROP_TABLE),
    ],
)
def test_classify_recognises_each_kind(statement: str, kind: str) -> None:
    assert classify(statement) == kind


def test_unknown_command_reports_first_token() -> None:
    with pytest.raises(UnsupportedCommand) as excinfo:
        classify("TRUNCATE users;")

    assert excinfo.value.token == "TRUNCATE"
    assert excinfo.value.message == "Unsupported SQL command: TRUNCATE"
    assert excinfo.value.kind == "UnsupportedCommand"


@pytest.mark.parametrize("statement", ["SHOW DATABASES", "show tables", "show  tables;", "SHOW TABLES FROM x;"])
def test_show_commands_require_exact_form(statement: str) -> None:
    with pytest.raises(UnsupportedCommand) as excinfo:
        classify(statement)

    assert excinfo.value.token.lower() == "show"


def test_command_reference_covers_every_kind() -> None:
    commands = {info.command.lower() for info in COMMAND_REFERENCE}

    assert commands == set(classifier.STATEMENT_KINDS)
    assert COMMAND_REFERENCE[0].to_dict()["example"] == "CREATE DATABASE my_db;"
