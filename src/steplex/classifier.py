"""Classifier — longest match across all token kinds, ties broken by PRIORITY.

Each kind has a scanner returning the greatest length of input, starting at
a given offset, that satisfies the kind's pattern (0 when it does not match).
The classifier runs every scanner whose pattern can start with the byte at the
offset, keeps the longest results and picks the highest priority among them.
"""

from __future__ import annotations

from collections.abc import Callable

from steplex.errors import ErrorKind, LexicalError
from steplex.tokens import (
    BASE64,
    DIGITS,
    HEX_UPPER,
    PRIORITY,
    RESOURCE_CHARS,
    SIGNS,
    UPPER,
    UPPER_ALNUM,
    Token,
    TokenKind,
    utf8_width,
)

_BANG = ord("!")
_HASH = ord("#")
_AT = ord("@")
_DOT = ord(".")
_QUOTE = ord("'")
_DQUOTE = ord('"')
_BACKSLASH = ord("\\")
_LT = ord("<")
_GT = ord(">")
_EXPONENT = frozenset(b"eE")

Scanner = Callable[[bytes, int], int]


# ----------------------------------------------------------------------
# Building blocks
# ----------------------------------------------------------------------


def _run(data: bytes, pos: int, chars: frozenset[int]) -> int:
    """Length of the run of bytes in chars starting at pos."""
    i = pos
    n = len(data)
    while i < n and data[i] in chars:
        i += 1
    return i - pos


def _ident(data: bytes, pos: int) -> int:
    """Length of an [A-Z][A-Z0-9]* identifier at pos."""
    if pos < len(data) and data[pos] in UPPER:
        return 1 + _run(data, pos + 1, UPPER_ALNUM)
    return 0


def _at(data: bytes, pos: int, byte: int) -> bool:
    return pos < len(data) and data[pos] == byte


def _prefixed(prefix: int, body: Callable[[bytes, int], int]) -> Scanner:
    def scan(data: bytes, pos: int) -> int:
        if not _at(data, pos, prefix):
            return 0
        n = body(data, pos + 1)
        return 1 + n if n else 0

    return scan


def _digits(data: bytes, pos: int) -> int:
    return _run(data, pos, DIGITS)


# ----------------------------------------------------------------------
# Scanners, one per kind
# ----------------------------------------------------------------------


def scan_integer(data: bytes, pos: int) -> int:
    i = pos + 1 if pos < len(data) and data[pos] in SIGNS else pos
    n = _digits(data, i)
    return i + n - pos if n else 0


def scan_real(data: bytes, pos: int) -> int:
    i = pos + 1 if pos < len(data) and data[pos] in SIGNS else pos
    n = _digits(data, i)
    if not n:
        return 0
    i += n
    if not _at(data, i, _DOT):
        return 0
    frac = _digits(data, i + 1)
    if not frac:
        return 0
    end = i + 1 + frac
    # Optional exponent; an incomplete one is left for the next token
    if end < len(data) and data[end] in _EXPONENT:
        j = end + 1
        if j < len(data) and data[j] in SIGNS:
            j += 1
        exp = _digits(data, j)
        if exp:
            end = j + exp
    return end - pos


def scan_string(data: bytes, pos: int) -> int:
    if not _at(data, pos, _QUOTE):
        return 0
    i = pos + 1
    n = len(data)
    while i < n:
        b = data[i]
        if b == _QUOTE:
            return i + 1 - pos
        if b == _BACKSLASH:
            if i + 1 >= n:
                return 0
            i += 1 + utf8_width(data, i + 1)
        else:
            i += 1
    return 0


def scan_resource(data: bytes, pos: int) -> int:
    if not _at(data, pos, _LT):
        return 0
    n = _run(data, pos + 1, RESOURCE_CHARS)
    if n and _at(data, pos + 1 + n, _GT):
        return n + 2
    return 0


def scan_enumeration(data: bytes, pos: int) -> int:
    if not _at(data, pos, _DOT):
        return 0
    n = _ident(data, pos + 1)
    if n and _at(data, pos + 1 + n, _DOT):
        return n + 2
    return 0


def _scan_binary_delimited(data: bytes, pos: int, width: int) -> int:
    delimiter = b'"' * width
    if not data.startswith(delimiter, pos):
        return 0
    i = pos + width
    i += _run(data, i, HEX_UPPER)
    if data.startswith(delimiter, i):
        return i + width - pos
    return 0


def scan_binary(data: bytes, pos: int) -> int:
    # "0F" and ""0F"" are both binary literals; the longer reading wins
    return max(_scan_binary_delimited(data, pos, 1), _scan_binary_delimited(data, pos, 2))


def scan_signature_content(data: bytes, pos: int) -> int:
    return _run(data, pos, BASE64)


SCANNERS: dict[TokenKind, Scanner] = {
    TokenKind.USER_DEFINED_KEYWORD: _prefixed(_BANG, _ident),
    TokenKind.STANDARD_KEYWORD: _ident,
    TokenKind.INTEGER: scan_integer,
    TokenKind.REAL: scan_real,
    TokenKind.STRING: scan_string,
    TokenKind.ENTITY_INSTANCE_NAME: _prefixed(_HASH, _digits),
    TokenKind.VALUE_INSTANCE_NAME: _prefixed(_AT, _digits),
    TokenKind.CONSTANT_ENTITY_NAME: _prefixed(_HASH, _ident),
    TokenKind.CONSTANT_VALUE_NAME: _prefixed(_AT, _ident),
    TokenKind.RESOURCE: scan_resource,
    TokenKind.ENUMERATION: scan_enumeration,
    TokenKind.BINARY: scan_binary,
    TokenKind.SIGNATURE_CONTENT: scan_signature_content,
}

# Bytes each kind's pattern can start with
_FIRST_BYTES: dict[TokenKind, frozenset[int]] = {
    TokenKind.USER_DEFINED_KEYWORD: frozenset([_BANG]),
    TokenKind.STANDARD_KEYWORD: UPPER,
    TokenKind.INTEGER: SIGNS | DIGITS,
    TokenKind.REAL: SIGNS | DIGITS,
    TokenKind.STRING: frozenset([_QUOTE]),
    TokenKind.ENTITY_INSTANCE_NAME: frozenset([_HASH]),
    TokenKind.VALUE_INSTANCE_NAME: frozenset([_AT]),
    TokenKind.CONSTANT_ENTITY_NAME: frozenset([_HASH]),
    TokenKind.CONSTANT_VALUE_NAME: frozenset([_AT]),
    TokenKind.RESOURCE: frozenset([_LT]),
    TokenKind.ENUMERATION: frozenset([_DOT]),
    TokenKind.BINARY: frozenset([_DQUOTE]),
    TokenKind.SIGNATURE_CONTENT: BASE64,
}

_DISPATCH: dict[int, tuple[TokenKind, ...]] = {
    byte: tuple(kind for kind in TokenKind if byte in _FIRST_BYTES[kind]) for byte in range(128)
}

_FAILURE_KINDS: dict[int, ErrorKind] = {
    _QUOTE: ErrorKind.UNTERMINATED_STRING,
    _DQUOTE: ErrorKind.MALFORMED_BINARY,
    _LT: ErrorKind.MALFORMED_RESOURCE,
    _DOT: ErrorKind.MALFORMED_ENUMERATION,
    _BANG: ErrorKind.MALFORMED_NAME,
    _HASH: ErrorKind.MALFORMED_NAME,
    _AT: ErrorKind.MALFORMED_NAME,
    ord("-"): ErrorKind.MALFORMED_NUMBER,
}


# ----------------------------------------------------------------------
# Classification
# ----------------------------------------------------------------------


def candidates(
    data: bytes, pos: int, exclude: frozenset[TokenKind] = frozenset()
) -> list[tuple[TokenKind, int]]:
    """Return (kind, length) for every kind that matches at pos.

    Kinds in exclude are known not to match here and are not scanned.
    """
    result = []
    for kind in _DISPATCH.get(data[pos], ()):
        if kind in exclude:
            continue
        length = SCANNERS[kind](data, pos)
        if length:
            result.append((kind, length))
    return result


def classify(
    data: bytes, pos: int, exclude: frozenset[TokenKind] = frozenset()
) -> Token | LexicalError:
    """Classify the lexeme starting at pos.

    pos must be in bounds and not on whitespace. On failure the returned
    error covers one character, the unit the caller skips before retrying.
    """
    matches = candidates(data, pos, exclude)
    if not matches:
        kind = _FAILURE_KINDS.get(data[pos], ErrorKind.UNRECOGNIZED_CHARACTER)
        return LexicalError(kind, pos, pos + utf8_width(data, pos))

    longest = max(length for _, length in matches)
    tied = [kind for kind, length in matches if length == longest]
    best = max(tied, key=PRIORITY.__getitem__)
    if len(tied) > 1 and sum(1 for k in tied if PRIORITY[k] == PRIORITY[best]) > 1:
        names = ", ".join(k.name for k in tied)
        raise RuntimeError(f"internal error: ambiguous match at offset {pos} ({names})")
    return Token(pos, best, pos + longest)


def classify_exact(lexeme: str | bytes) -> TokenKind | None:
    """Return the kind of lexeme if it lexes as exactly one token, else None."""
    data = lexeme.encode("utf-8") if isinstance(lexeme, str) else lexeme
    if not data:
        return None
    result = classify(data, 0)
    if isinstance(result, Token) and result.end == len(data):
        return result.kind
    return None
