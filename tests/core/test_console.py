"""Tests for the interactive console."""

from __future__ import annotations

from typing import Callable, Iterator

from src.core.console import PlaygroundCLI, format_table
from src.engine.interpreter import Interpreter


def _scripted_input(lines: list[str]) -> Callable[[str], str]:
    iterator: Iterator[str] = iter(lines)
    prompts: list[str] = []

    def _input(prompt: str) -> str:
        prompts.append(prompt)
        try:
            return next(iterator)
        except StopIteration as exc:
            raise EOFError from exc

    _input.prompts = prompts  # type: ignore[attr-defined]
    return _input


def test_console_runs_statements_and_renders_tables() -> None:
    outputs: list[str] = []
    input_func = _scripted_input(
        [
            "CREATE DATABASE shop;",
            "USE shop;",
            "CREATE TABLE users (name, email);",
            "INSERT INTO users (name, email) VALUES ('Ana', 'a@x.com');",
            "SELECT * FROM users;",
            "/exit",
        ]
    )
    cli = PlaygroundCLI(interpreter=Interpreter(), input_func=input_func, output_func=outputs.append)

    cli.start()

    assert "Retrieved 1 rows from users" in outputs
    assert "| Ana  | a@x.com |" in outputs
    assert outputs[-1] == "Session ended."
    assert input_func.prompts[:2] == ["sql> ", "sql> "]  # type: ignore[attr-defined]
    assert input_func.prompts[2] == "[shop]> "  # type: ignore[attr-defined]


def test_console_reports_errors_with_kind() -> None:
    outputs: list[str] = []
    cli = PlaygroundCLI(
        interpreter=Interpreter(),
        input_func=_scripted_input(["SELECT * FROM ghost;"]),
        output_func=outputs.append,
    )

    cli.start()

    assert (
        "Error [NoDatabaseSelected]: No database selected. Use 'USE database_name;' first."
        in outputs
    )
    assert outputs[-1] == "\nSession ended."


def test_console_slash_commands() -> None:
    outputs: list[str] = []
    cli = PlaygroundCLI(
        interpreter=Interpreter(),
        input_func=_scripted_input(
            ["/databases", "CREATE DATABASE shop;", "/databases", "/history", "/help", "/nope"]
        ),
        output_func=outputs.append,
    )

    cli.start()

    assert "No databases yet. Try: CREATE DATABASE my_db;" in outputs
    assert "  shop" in outputs
    assert "Success: CREATE DATABASE shop;\nDatabase 'shop' created successfully" in outputs
    assert "Supported commands:" in outputs
    assert "Unknown command: /nope. Try '/help'." in outputs


def test_format_table_shows_nulls() -> None:
    lines = format_table(["name", "email"], [{"name": "Ana", "email": None}])

    assert lines == [
        "+------+-------+",
        "| name | email |",
        "+------+-------+",
        "| Ana  | NULL  |",
        "+------+-------+",
    ]
