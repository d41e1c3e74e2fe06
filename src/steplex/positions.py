"""Byte offset to line/column mapping for diagnostics."""

from __future__ import annotations

from bisect import bisect_right

from steplex.tokens import Position


class LineIndex:
    """Map UTF-8 byte offsets in a buffer to 1-based line and column.

    Lines break on LF only. Columns count characters, not bytes.
    """

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._line_starts = [0]
        start = data.find(b"\n")
        while start != -1:
            self._line_starts.append(start + 1)
            start = data.find(b"\n", start + 1)

    def position(self, offset: int) -> Position:
        if not 0 <= offset <= len(self._data):
            raise ValueError(f"offset {offset} outside buffer of {len(self._data)} bytes")
        line_idx = bisect_right(self._line_starts, offset) - 1
        line_start = self._line_starts[line_idx]
        prefix = self._data[line_start:offset].decode("utf-8", errors="replace")
        return Position(line_idx + 1, len(prefix) + 1, offset)

    def utf16_column(self, offset: int) -> int:
        """0-based column of offset in UTF-16 code units, as LSP clients count."""
        line_start = self._line_starts[bisect_right(self._line_starts, offset) - 1]
        prefix = self._data[line_start:offset].decode("utf-8", errors="replace")
        return len(prefix.encode("utf-16-le")) // 2
