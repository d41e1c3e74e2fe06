"""Token kinds, data structures, and byte classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenKind(Enum):
    USER_DEFINED_KEYWORD = auto()  # !ABC1
    STANDARD_KEYWORD = auto()  # ABC1
    INTEGER = auto()  # [+-]123
    REAL = auto()  # [+-]1.5[E[+-]6]
    STRING = auto()  # 'text', \ escapes the next character
    ENTITY_INSTANCE_NAME = auto()  # #123
    VALUE_INSTANCE_NAME = auto()  # @123
    CONSTANT_ENTITY_NAME = auto()  # #ABC
    CONSTANT_VALUE_NAME = auto()  # @ABC
    RESOURCE = auto()  # <http://...>
    ENUMERATION = auto()  # .ABC.
    BINARY = auto()  # "0F" or ""0F""
    SIGNATURE_CONTENT = auto()  # base64 run


# Tie-break ranking among equal-length matches; higher wins.
PRIORITY: dict[TokenKind, int] = {
    TokenKind.USER_DEFINED_KEYWORD: 2,
    TokenKind.STANDARD_KEYWORD: 3,
    TokenKind.INTEGER: 3,
    TokenKind.REAL: 2,
    TokenKind.STRING: 2,
    TokenKind.ENTITY_INSTANCE_NAME: 2,
    TokenKind.VALUE_INSTANCE_NAME: 2,
    TokenKind.CONSTANT_ENTITY_NAME: 2,
    TokenKind.CONSTANT_VALUE_NAME: 2,
    TokenKind.RESOURCE: 2,
    TokenKind.ENUMERATION: 2,
    TokenKind.BINARY: 2,
    TokenKind.SIGNATURE_CONTENT: 1,
}


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based byte offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Token:
    """A classified lexeme occupying the half-open byte range [start, end)."""

    start: int
    kind: TokenKind
    end: int

    def as_tuple(self) -> tuple[int, TokenKind, int]:
        return (self.start, self.kind, self.end)


# Byte classes. Input is scanned as UTF-8 bytes; every pattern is ASCII.
WHITESPACE = frozenset(b" \t\n\f")
DIGITS = frozenset(b"0123456789")
UPPER = frozenset(b"ABCDEFGHIJKLMNOPQRSTUVWXYZ")
UPPER_ALNUM = UPPER | DIGITS
HEX_UPPER = frozenset(b"0123456789ABCDEF")
SIGNS = frozenset(b"+-")
BASE64 = UPPER | frozenset(b"abcdefghijklmnopqrstuvwxyz") | DIGITS | frozenset(b"+/=")
RESOURCE_CHARS = (
    UPPER
    | frozenset(b"abcdefghijklmnopqrstuvwxyz")
    | DIGITS
    | frozenset(b":/?#[]@!$&'()*+,;=.%-")
)


def utf8_width(data: bytes, pos: int) -> int:
    """Return the byte length of the UTF-8 sequence starting at pos.

    Malformed or truncated sequences count only the bytes that belong to them,
    so the result is always at least 1 and never crosses a character boundary.
    """
    lead = data[pos]
    if lead < 0x80:
        return 1
    if lead >= 0xF0:
        expected = 4
    elif lead >= 0xE0:
        expected = 3
    elif lead >= 0xC0:
        expected = 2
    else:
        return 1  # stray continuation byte
    width = 1
    while width < expected and pos + width < len(data) and 0x80 <= data[pos + width] < 0xC0:
        width += 1
    return width
