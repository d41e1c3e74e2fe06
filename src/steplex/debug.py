"""Token dumps: one line per item, or JSON records."""

from __future__ import annotations

import json
import sys
from collections.abc import Iterable
from typing import Any, TextIO

from steplex.errors import LexicalError
from steplex.lexer import LexResult
from steplex.tokens import Token


def _text(item: LexResult, data: bytes) -> str:
    return data[item.start : item.end].decode("utf-8", errors="replace")


def format_item(item: LexResult, data: bytes, *, text: bool = True) -> str:
    """Render one stream item as ``start..end KIND 'lexeme'``."""
    if isinstance(item, Token):
        line = f"{item.start}..{item.end} {item.kind.name}"
    else:
        line = f"{item.start}..{item.end} ERROR({item.kind.name})"
    if text:
        line += f" {_text(item, data)!r}"
    return line


def item_record(item: LexResult, data: bytes, *, text: bool = True) -> dict[str, Any]:
    record: dict[str, Any] = {"start": item.start, "end": item.end}
    if isinstance(item, LexicalError):
        record["error"] = item.kind.name
        record["message"] = item.message
    else:
        record["kind"] = item.kind.name
    if text:
        record["text"] = _text(item, data)
    return record


def dump_tokens(
    items: Iterable[LexResult],
    data: bytes,
    *,
    text: bool = True,
    file: TextIO = sys.stderr,
) -> None:
    """Print a human-readable token listing to *file*."""
    for item in items:
        file.write(format_item(item, data, text=text) + "\n")


def dump_json(
    items: Iterable[LexResult],
    data: bytes,
    *,
    text: bool = True,
    file: TextIO = sys.stdout,
) -> None:
    records = [item_record(item, data, text=text) for item in items]
    json.dump(records, file, indent=2)
    file.write("\n")
