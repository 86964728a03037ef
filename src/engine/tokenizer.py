"""Lexer for the playground SQL dialect."""

from __future__ import annotations

from dataclasses import dataclass

from src.engine.errors import StatementSyntaxError

WORD = "WORD"
STRING = "STRING"
OP = "OP"
LPAREN = "LPAREN"
RPAREN = "RPAREN"
COMMA = "COMMA"
SEMI = "SEMI"
STAR = "STAR"
EOF = "EOF"

_PUNCTUATION = {
    "(": LPAREN,
    ")": RPAREN,
    ",": COMMA,
    ";": SEMI,
    "*": STAR,
}
_OPERATOR_CHARS = frozenset("=!<>")
_WORD_STOP = frozenset(_PUNCTUATION) | _OPERATOR_CHARS | {"'"}


@dataclass(frozen=True, slots=True)
class Token:
    kind: str
    text: str
    position: int

    @property
    def value(self) -> str:
        """Return the literal content (quotes removed for strings)."""

        if self.kind == STRING:
            return self.text[1:-1].replace("''", "'")
        return self.text

    def is_keyword(self, keyword: str) -> bool:
        return self.kind == WORD and self.text.lower() == keyword


def tokenize(statement: str) -> list[Token]:
    """Split *statement* into tokens, always ending with an ``EOF`` token."""

    tokens: list[Token] = []
    index = 0
    length = len(statement)
    while index < length:
        char = statement[index]
        if char.isspace():
            index += 1
            continue
        if char in _PUNCTUATION:
            tokens.append(Token(_PUNCTUATION[char], char, index))
            index += 1
            continue
        if char in _OPERATOR_CHARS:
            end = index
            while end < length and statement[end] in _OPERATOR_CHARS:
                end += 1
            tokens.append(Token(OP, statement[index:end], index))
            index = end
            continue
        if char == "'":
            end = _scan_string(statement, index)
            tokens.append(Token(STRING, statement[index:end], index))
            index = end
            continue
        end = index
        while end < length and not statement[end].isspace() and statement[end] not in _WORD_STOP:
            end += 1
        tokens.append(Token(WORD, statement[index:end], index))
        index = end
    tokens.append(Token(EOF, "", length))
    return tokens


def _scan_string(statement: str, start: int) -> int:
    index = start + 1
    length = len(statement)
    while index < length:
        if statement[index] == "'":
            if index + 1 < length and statement[index + 1] == "'":
                index += 2
                continue
            return index + 1
        index += 1
    raise StatementSyntaxError("Unterminated string literal", statement[start:])


__all__ = [
    "COMMA",
    "EOF",
    "LPAREN",
    "OP",
    "RPAREN",
    "SEMI",
    "STAR",
    "STRING",
    "WORD",
    "Token",
    "tokenize",
]
