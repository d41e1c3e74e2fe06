"""Lexical error items and the exception used by strict helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from steplex.tokens import Position


class ErrorKind(Enum):
    UNRECOGNIZED_CHARACTER = auto()
    UNTERMINATED_STRING = auto()
    MALFORMED_BINARY = auto()
    MALFORMED_RESOURCE = auto()
    MALFORMED_ENUMERATION = auto()
    MALFORMED_NAME = auto()  # !, # or @ without a valid body
    MALFORMED_NUMBER = auto()  # sign without digits


_MESSAGES = {
    ErrorKind.UNRECOGNIZED_CHARACTER: "unrecognized character",
    ErrorKind.UNTERMINATED_STRING: "unterminated string literal",
    ErrorKind.MALFORMED_BINARY: "malformed binary literal",
    ErrorKind.MALFORMED_RESOURCE: "malformed resource reference",
    ErrorKind.MALFORMED_ENUMERATION: "malformed enumeration value",
    ErrorKind.MALFORMED_NAME: "malformed name",
    ErrorKind.MALFORMED_NUMBER: "sign without digits",
}


@dataclass(frozen=True, slots=True)
class LexicalError:
    """No token category matches at start; [start, end) is the skipped unit."""

    kind: ErrorKind
    start: int
    end: int

    @property
    def message(self) -> str:
        return _MESSAGES[self.kind]


class LexError(Exception):
    """Raised by strict helpers on the first lexical error, with source context."""

    def __init__(self, error: LexicalError, position: Position, source: str | bytes) -> None:
        self.error = error
        self.message = error.message
        self.position = position
        if isinstance(source, bytes):
            source = source.decode("utf-8", errors="replace")
        self.source = source
        super().__init__(self.format())

    def format(self, filename: str = "input.stp") -> str:
        # LF only: form-feed is whitespace here, not a line break
        lines = self.source.split("\n")
        line_idx = self.position.line - 1
        col = self.position.column

        if 0 <= line_idx < len(lines):
            source_line = lines[line_idx].rstrip("\r")
        else:
            source_line = ""

        pad = " " * (col - 1)
        carets = "^"

        line_num = str(self.position.line)
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        return (
            f"error: {self.message}\n"
            f"{' ' * gutter_width}--> {filename}:{self.position.line}:{col}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}{carets}"
        )
