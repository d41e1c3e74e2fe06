"""STEP Part 21 lexer — a lazy stream of tokens and lexical errors."""

from __future__ import annotations

from collections.abc import Iterator

from steplex.classifier import classify
from steplex.errors import ErrorKind, LexError, LexicalError
from steplex.logger import get_logger
from steplex.positions import LineIndex
from steplex.tokens import WHITESPACE, Position, Token, TokenKind

logger = get_logger(__name__)

LexResult = Token | LexicalError

_NO_STRING = frozenset([TokenKind.STRING])


class Lexer:
    """Pull tokens from a STEP exchange structure buffer.

    Iterating yields Token or LexicalError items in input order. Errors do
    not end the stream: the offending character is skipped and lexing
    resumes after it. Offsets are UTF-8 byte offsets into ``data``.
    """

    def __init__(self, source: str | bytes) -> None:
        self._data = source.encode("utf-8") if isinstance(source, str) else source
        self._pos = 0
        self._span = (0, 0)
        self._index: LineIndex | None = None
        # Set once a string runs to end of input; no later string can close
        self._exclude: frozenset[TokenKind] = frozenset()

    def __iter__(self) -> Iterator[LexResult]:
        return self

    def __next__(self) -> LexResult:
        self._skip_whitespace()
        if self._pos >= len(self._data):
            raise StopIteration

        result = classify(self._data, self._pos, self._exclude)
        self._span = (result.start, result.end)
        self._pos = result.end
        if isinstance(result, LexicalError):
            logger.debug("%s at offset %d", result.message, result.start)
            if result.kind is ErrorKind.UNTERMINATED_STRING:
                self._exclude = _NO_STRING
        return result

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _skip_whitespace(self) -> None:
        data = self._data
        pos = self._pos
        while pos < len(data) and data[pos] in WHITESPACE:
            pos += 1
        self._pos = pos

    @property
    def data(self) -> bytes:
        return self._data

    @property
    def offset(self) -> int:
        """Byte offset of the cursor."""
        return self._pos

    @property
    def span(self) -> tuple[int, int]:
        """[start, end) of the most recently yielded item."""
        return self._span

    def slice(self, item: LexResult | None = None) -> str:
        """Source text of item, or of the most recently yielded item."""
        start, end = self._span if item is None else (item.start, item.end)
        return self._data[start:end].decode("utf-8", errors="replace")

    def position(self, offset: int) -> Position:
        if self._index is None:
            self._index = LineIndex(self._data)
        return self._index.position(offset)

    def error(self, item: LexicalError) -> LexError:
        """Build the exception describing item, with line/column context."""
        return LexError(item, self.position(item.start), self._data)


def tokenize(source: str | bytes, *, strict: bool = False) -> list[LexResult]:
    """Convenience function: lex source and return every item as a list.

    With strict=True the first lexical error is raised as LexError instead.
    """
    lexer = Lexer(source)
    items: list[LexResult] = []
    for item in lexer:
        if strict and isinstance(item, LexicalError):
            raise lexer.error(item)
        items.append(item)
    return items
