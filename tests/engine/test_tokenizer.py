"""Tests for the SQL tokenizer."""

from __future__ import annotations

import pytest

from src.engine.errors import StatementSyntaxError
from src.engine.tokenizer import EOF, LPAREN, OP, RPAREN, SEMI, STAR, STRING, WORD, tokenize


def test_insert_statement_token_kinds() -> None:
    tokens = tokenize("INSERT INTO users (name) VALUES ('Ana');")

    assert [token.kind for token in tokens] == [
        WORD, WORD, WORD, LPAREN, WORD, RPAREN, WORD, LPAREN, STRING, RPAREN, SEMI, EOF,
    ]
    assert tokens[8].value == "Ana"


def test_string_literal_unescapes_doubled_quotes() -> None:
    token = tokenize("'it''s here'")[0]

    assert token.kind == STRING
    assert token.value == "it's here"


def test_operators_are_read_as_maximal_runs() -> None:
    assert tokenize("age >= 5")[1].text == ">="
    assert tokenize("a<>b")[1].text == "<>"
    assert tokenize("a==b")[1].kind == OP


def test_bare_words_keep_punctuation_like_email_addresses() -> None:
    tokens = tokenize("a@x.com,-5")

    assert tokens[0].text == "a@x.com"
    assert tokens[2].text == "-5"


def test_star_and_keyword_helpers() -> None:
    tokens = tokenize("select * FROM t")

    assert tokens[1].kind == STAR
    assert tokens[2].is_keyword("from")
    assert not tokens[3].is_keyword("from")


def test_unterminated_string_is_a_syntax_error() -> None:
    with pytest.raises(StatementSyntaxError):
        tokenize("INSERT INTO t (a) VALUES ('oops);")
