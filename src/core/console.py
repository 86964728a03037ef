"""Interactive terminal front end for the SQL playground."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence
from uuid import uuid4

from src.core.config import load_settings
from src.core.dependencies import build_dependencies
from src.core.logging_utils import configure_logging
from src.engine.classifier import COMMAND_REFERENCE
from src.engine.interpreter import ExecutionOutcome, Interpreter

_exit_commands = {"/exit", "exit", "quit", ":q"}
_NULL_TEXT = "NULL"


@dataclass
class PlaygroundCLI:
    """Simple read-eval-print loop over a single interpreter session."""

    interpreter: Interpreter
    input_func: Callable[[str], str] = field(default=input)
    output_func: Callable[[str], None] = field(default=print)

    def start(self) -> None:
        """Launch an interactive session until EOF or an exit command."""

        self.output_func(
            "Type SQL statements to run them. Use '/help' for supported commands,"
            " '/databases' to browse, '/history' for past results and '/exit' to leave."
        )

        while True:
            try:
                raw = self.input_func(self._prompt())
            except EOFError:
                self.output_func("\nSession ended.")
                break

            line = raw.strip()
            if not line:
                continue
            if line.lower() in _exit_commands:
                self.output_func("Session ended.")
                break
            if line.startswith("/"):
                self._handle_command(line)
                continue

            self.run(line)

    def run(self, statement: str) -> ExecutionOutcome:
        outcome = self.interpreter.execute(statement)
        self._render_outcome(outcome)
        return outcome

    def _prompt(self) -> str:
        selected = self.interpreter.selected_database
        return f"[{selected}]> " if selected else "sql> "

    def _handle_command(self, command: str) -> None:
        name = command.split(maxsplit=1)[0].lower()
        if name == "/help":
            self._render_help()
        elif name == "/history":
            self._render_history()
        elif name == "/databases":
            self._render_explorer()
        else:
            self.output_func(f"Unknown command: {name}. Try '/help'.")

    def _render_outcome(self, outcome: ExecutionOutcome) -> None:
        if outcome.error is not None:
            self.output_func(f"Error [{outcome.error.kind}]: {outcome.error.message}")
            self.output_func("")
            return

        result = outcome.result
        if result is None:
            return
        self.output_func(result.message)
        if result.columns is not None and result.rows is not None:
            for line in format_table(result.columns, result.rows):
                self.output_func(line)
        self.output_func("")

    def _render_help(self) -> None:
        self.output_func("Supported commands:")
        for info in COMMAND_REFERENCE:
            self.output_func(f"  {info.command:<16} {info.description}")
            self.output_func(f"  {'':<16} e.g. {info.example}")

    def _render_history(self) -> None:
        if not self.interpreter.history:
            self.output_func("No statements executed yet.")
            return
        for entry in self.interpreter.history:
            self.output_func(entry.render())
            self.output_func("")

    def _render_explorer(self) -> None:
        databases = self.interpreter.explorer()
        if not databases:
            self.output_func("No databases yet. Try: CREATE DATABASE my_db;")
            return
        for database in databases:
            marker = "*" if database["selected"] else " "
            self.output_func(f"{marker} {database['name']}")
            for table in database["tables"]:
                columns = ", ".join(table["columns"])
                self.output_func(f"    - {table['name']} ({columns}) [{table['row_count']} rows]")


def format_table(columns: Sequence[str], rows: Sequence[dict[str, Any]]) -> list[str]:
    """Render *rows* as a fixed-width text table."""

    cells = [[_cell(row.get(column)) for column in columns] for row in rows]
    widths = [len(column) for column in columns]
    for line in cells:
        for index, cell in enumerate(line):
            widths[index] = max(widths[index], len(cell))

    border = "+" + "+".join("-" * (width + 2) for width in widths) + "+"
    header = "| " + " | ".join(col.ljust(widths[i]) for i, col in enumerate(columns)) + " |"
    lines = [border, header, border]
    for line in cells:
        lines.append("| " + " | ".join(cell.ljust(widths[i]) for i, cell in enumerate(line)) + " |")
    if cells:
        lines.append(border)
    return lines


def _cell(value: Any) -> str:
    return _NULL_TEXT if value is None else str(value)


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Interactive SQL playground")
    parser.add_argument("--config", default="configs/dev.yaml", help="Path to the YAML config file")
    parser.add_argument(
        "-e",
        "--execute",
        action="append",
        default=[],
        metavar="STATEMENT",
        help="Run a statement and exit; repeat to run several in order",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    configure_logging(debug=args.debug)
    settings = load_settings(args.config)
    dependencies = build_dependencies(settings)
    interpreter = dependencies.create_interpreter(f"cli-{uuid4().hex[:8]}")
    cli = PlaygroundCLI(interpreter=interpreter)

    if args.execute:
        failed = False
        for statement in args.execute:
            failed = not cli.run(statement).ok or failed
        raise SystemExit(1 if failed else 0)
    cli.start()


if __name__ == "__main__":
    main()
