"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from steplex.errors import LexicalError
from steplex.lexer import LexResult, tokenize
from steplex.tokens import Token, TokenKind


@pytest.fixture
def lex():
    """Return a helper that tokenizes source and returns every stream item."""

    def _lex(source: str | bytes) -> list[LexResult]:
        return tokenize(source)

    return _lex


def assert_kinds(items: list[LexResult], expected: list[TokenKind | None]) -> None:
    """Assert item kinds in order; None stands for a lexical error."""
    actual = [i.kind if isinstance(i, Token) else None for i in items]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_texts(items: list[LexResult], source: str, expected: list[str]) -> None:
    """Assert the source text covered by each item."""
    data = source.encode("utf-8")
    actual = [data[i.start : i.end].decode("utf-8") for i in items]
    assert actual == expected, f"Expected {expected}, got {actual}"


def single(source: str | bytes) -> Token:
    """Lex source and assert it is exactly one token covering all of it."""
    items = tokenize(source)
    size = len(source.encode("utf-8") if isinstance(source, str) else source)
    assert len(items) == 1, f"Expected one token, got {items}"
    tok = items[0]
    assert isinstance(tok, Token), f"Expected a token, got {tok}"
    assert (tok.start, tok.end) == (0, size)
    return tok


def errors(items: list[LexResult]) -> list[LexicalError]:
    return [i for i in items if isinstance(i, LexicalError)]
