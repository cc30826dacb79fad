"""Cursor-relative editing on top of a gap buffer."""

from __future__ import annotations

from typing import Optional

from gap_engine.runtime.telemetry import span

from .gap import GapBuffer
from .index import LinePosition
from .validation import ensure_offset


class EditCursor:
    """Edit point of one buffer; edits happen at, and move, the cursor.

    Deleting through another path can leave the stored offset past the end
    of the document, in which case it is clamped the next time it is read.
    """

    def __init__(
        self,
        buffer: GapBuffer,
        offset: int = 0,
        *,
        logger_name: Optional[str] = None,
    ) -> None:
        self.buffer = buffer
        self._offset = ensure_offset(offset, len(buffer))
        self._logger_name = logger_name

    @property
    def offset(self) -> int:
        length = len(self.buffer)
        if self._offset > length:
            self._offset = length
        return self._offset

    @property
    def position(self) -> LinePosition:
        return self.buffer.byte_to_line_col(self.offset)

    def move_to(self, offset: int) -> int:
        self._offset = ensure_offset(offset, len(self.buffer))
        return self._offset

    def move_to_line(self, line: int, col: int = 0) -> int:
        self._offset = self.buffer.line_col_to_byte(line, col)
        return self._offset

    def move_by_codepoints(self, delta: int) -> int:
        """Step ``delta`` codepoints, left when negative, clamped to the edges."""

        index = self.buffer.index
        target = index.byte_to_codepoint(self.offset) + delta
        target = max(0, min(target, index.codepoint_count()))
        self._offset = index.codepoint_to_byte(target)
        return self._offset

    def insert(self, data: bytes) -> int:
        """Insert at the cursor and move past the inserted bytes."""

        offset = self.offset
        with span(
            "cursor::insert",
            logger_name=self._logger_name,
            component="cursor",
            metadata={"offset": offset},
        ) as handle:
            before = len(self.buffer)
            self.buffer.insert(offset, data)
            inserted = len(self.buffer) - before
            handle.add_metadata("inserted", inserted)
            self._offset = offset + inserted
            return self._offset

    def delete_bytes(self, count: int) -> bytes:
        offset = self.offset
        with span(
            "cursor::delete_bytes",
            logger_name=self._logger_name,
            component="cursor",
            metadata={"offset": offset, "count": count},
        ):
            removed = self.buffer.slice(offset, count)
            self.buffer.delete(offset, count)
            return removed

    def backspace(self) -> bytes:
        """Remove the codepoint before the cursor."""

        offset = self.offset
        if offset == 0:
            return b""
        with span(
            "cursor::backspace",
            logger_name=self._logger_name,
            component="cursor",
            metadata={"offset": offset},
        ):
            start = self.buffer.index.previous_boundary(offset)
            removed = self.buffer.slice(start, offset - start)
            self.buffer.delete(start, offset - start)
            self._offset = start
            return removed

    def delete_forward(self) -> bytes:
        """Remove the codepoint under the cursor."""

        offset = self.offset
        if offset == len(self.buffer):
            return b""
        with span(
            "cursor::delete_forward",
            logger_name=self._logger_name,
            component="cursor",
            metadata={"offset": offset},
        ):
            end = self.buffer.index.next_boundary(offset)
            removed = self.buffer.slice(offset, end - offset)
            self.buffer.delete(offset, end - offset)
            return removed

    def __repr__(self) -> str:
        return f"EditCursor(offset={self.offset}, buffer={self.buffer!r})"


__all__ = ["EditCursor"]
