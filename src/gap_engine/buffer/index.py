"""Codepoint and line translation over a gap buffer's logical bytes.

UTF-8 is decoded by lead byte only: continuation bytes are never checked, a
byte that cannot start a sequence counts as a one-byte unit, and a sequence
cut short by the end of the document is a unit of whatever bytes remain.
"""

from __future__ import annotations

import operator
from bisect import bisect_right
from typing import TYPE_CHECKING, Iterator, NamedTuple

from .validation import OutOfRangeError, ensure_offset

if TYPE_CHECKING:  # pragma: no cover
    from .gap import GapBuffer

NEWLINE = 0x0A


def sequence_length(lead: int) -> int:
    """Width in bytes announced by a UTF-8 lead byte."""

    if lead < 0x80:
        return 1
    if lead & 0xE0 == 0xC0:
        return 2
    if lead & 0xF0 == 0xE0:
        return 3
    if lead & 0xF8 == 0xF0:
        return 4
    return 1


class LinePosition(NamedTuple):
    line: int
    col: int


class LineStarts:
    """Restartable lazy sequence of line-start offsets.

    Every iteration rescans the buffer. Changing the buffer while an
    iterator is live makes that iterator raise ``RuntimeError``.
    """

    def __init__(self, buffer: "GapBuffer") -> None:
        self._buffer = buffer

    def __iter__(self) -> Iterator[int]:
        buffer = self._buffer
        version = buffer.version
        yield 0
        offset = 0
        while True:
            if buffer.version != version:
                raise RuntimeError("buffer mutated while scanning line starts")
            hit = buffer.find_byte(NEWLINE, offset)
            if hit < 0:
                return
            offset = hit + 1
            yield offset

    def __repr__(self) -> str:
        return f"LineStarts({self._buffer!r})"


class PositionIndex:
    """Read-only translator between byte, codepoint, and line coordinates."""

    def __init__(self, buffer: "GapBuffer") -> None:
        self._buffer = buffer
        self._lines: tuple[int, ...] = ()
        self._lines_version = -1

    def _unit_width(self, offset: int, length: int) -> int:
        return min(sequence_length(self._buffer.byte_at(offset)), length - offset)

    # Codepoints

    def codepoint_to_byte(self, n: int) -> int:
        """Byte offset where codepoint ``n`` starts; the count maps to the end."""

        target = operator.index(n)
        length = len(self._buffer)
        if target < 0:
            raise OutOfRangeError(
                f"codepoint {target} is negative", offset=target, limit=0
            )

        offset = 0
        for seen in range(target):
            if offset >= length:
                raise OutOfRangeError(
                    f"codepoint {target} past the end ({seen} codepoints)",
                    offset=target,
                    limit=seen,
                )
            offset += self._unit_width(offset, length)
        return offset

    def byte_to_codepoint(self, offset: int) -> int:
        """Index of the codepoint containing ``offset``."""

        length = len(self._buffer)
        offset = ensure_offset(offset, length)
        position = count = 0
        while position < offset:
            position += self._unit_width(position, length)
            count += 1
        if position > offset:
            count -= 1
        return count

    def codepoint_count(self) -> int:
        return self.byte_to_codepoint(len(self._buffer))

    def previous_boundary(self, offset: int) -> int:
        """Start of the codepoint unit ending at or spanning ``offset``."""

        offset = ensure_offset(offset, len(self._buffer))
        if offset == 0:
            return 0
        index = self.byte_to_codepoint(offset)
        start = self.codepoint_to_byte(index)
        if start < offset:
            return start
        return self.codepoint_to_byte(index - 1)

    def next_boundary(self, offset: int) -> int:
        """Start of the codepoint unit following the one at ``offset``."""

        length = len(self._buffer)
        offset = ensure_offset(offset, length)
        if offset == length:
            return length
        return self.codepoint_to_byte(self.byte_to_codepoint(offset) + 1)

    # Lines

    def line_start_offsets(self) -> LineStarts:
        return LineStarts(self._buffer)

    def _line_table(self) -> tuple[int, ...]:
        if self._lines_version != self._buffer.version:
            self._lines = tuple(LineStarts(self._buffer))
            self._lines_version = self._buffer.version
        return self._lines

    def line_count(self) -> int:
        return len(self._line_table())

    def byte_to_line_col(self, offset: int) -> LinePosition:
        offset = ensure_offset(offset, len(self._buffer))
        table = self._line_table()
        line = bisect_right(table, offset) - 1
        return LinePosition(line, offset - table[line])

    def line_to_byte(self, line: int) -> int:
        table = self._line_table()
        line = operator.index(line)
        if line < 0 or line >= len(table):
            raise OutOfRangeError(
                f"line {line} outside [0, {len(table)})",
                offset=line,
                limit=len(table),
            )
        return table[line]

    def _line_span(self, line: int) -> tuple[int, int]:
        start = self.line_to_byte(line)
        table = self._line_table()
        if line + 1 < len(table):
            return start, table[line + 1] - 1
        return start, len(self._buffer)

    def line_col_to_byte(self, line: int, col: int) -> int:
        start, end = self._line_span(line)
        return start + ensure_offset(col, end - start, what="column")

    def line_bytes(self, line: int) -> bytes:
        """Content of ``line`` without its terminating newline."""

        start, end = self._line_span(line)
        return self._buffer.slice(start, end - start)


__all__ = [
    "LinePosition",
    "LineStarts",
    "NEWLINE",
    "PositionIndex",
    "sequence_length",
]
