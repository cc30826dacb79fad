"""Gap buffer storage: one byte block split by a movable gap."""

from __future__ import annotations

import operator
from typing import Iterator, Optional

from gap_engine.config import BufferConfig
from gap_engine.runtime.telemetry import record_event

from .index import LinePosition, LineStarts, PositionIndex
from .validation import OutOfRangeError, ensure_offset, ensure_span


def _as_bytes(data: object) -> bytes:
    if isinstance(data, str):
        raise TypeError("GapBuffer stores bytes; encode text before inserting")
    return bytes(memoryview(data))  # type: ignore[arg-type]


class GapBuffer:
    """Byte document held as ``block[:gap_start] + block[gap_end:]``.

    The content is treated as UTF-8 by the position queries but is never
    validated; any byte sequence can be stored. Reads never move the gap,
    mutations first move it to the edit point.
    """

    def __init__(
        self,
        initial: bytes = b"",
        *,
        config: Optional[BufferConfig] = None,
        capacity: Optional[int] = None,
        logger_name: Optional[str] = None,
    ) -> None:
        self.config = config or BufferConfig()
        data = _as_bytes(initial)
        if capacity is None:
            capacity = self.config.initial_capacity
        elif operator.index(capacity) < 0:
            raise ValueError("capacity cannot be negative")
        size = max(operator.index(capacity), len(data))

        self._block = bytearray(size)
        self._gap_start = 0
        self._gap_end = size
        self._version = 0
        self._logger_name = logger_name
        self.index = PositionIndex(self)
        if data:
            self.insert(0, data)

    @classmethod
    def from_text(cls, text: str, **kwargs) -> "GapBuffer":
        return cls(text.encode("utf-8"), **kwargs)

    @property
    def capacity(self) -> int:
        return len(self._block)

    @property
    def gap_start(self) -> int:
        return self._gap_start

    @property
    def gap_end(self) -> int:
        return self._gap_end

    @property
    def gap_size(self) -> int:
        return self._gap_end - self._gap_start

    @property
    def version(self) -> int:
        """Counter bumped by every content change."""

        return self._version

    def __len__(self) -> int:
        return len(self._block) - (self._gap_end - self._gap_start)

    # Gap management

    def move_gap_to(self, offset: int) -> None:
        """Relocate the gap so that it starts at logical ``offset``.

        Only the bytes between the old and new positions are copied.
        """

        offset = ensure_offset(offset, len(self))
        start, end = self._gap_start, self._gap_end
        if offset == start:
            return

        if offset < start:
            moved = start - offset
            self._block[end - moved : end] = self._block[offset:start]
            self._gap_start = offset
            self._gap_end = end - moved
        else:
            moved = offset - start
            self._block[start : start + moved] = self._block[end : end + moved]
            self._gap_start = offset
            self._gap_end = end + moved

    def ensure_gap(self, needed: int) -> None:
        """Grow the block until the gap holds at least ``needed`` bytes."""

        needed = operator.index(needed)
        if needed < 0:
            raise ValueError("needed cannot be negative")
        if self.gap_size >= needed:
            return

        old_capacity = len(self._block)
        new_capacity = self.config.grown_capacity(old_capacity, needed)
        tail = old_capacity - self._gap_end

        block = bytearray(new_capacity)
        block[: self._gap_start] = self._block[: self._gap_start]
        block[new_capacity - tail :] = self._block[self._gap_end :]
        self._block = block
        self._gap_end = new_capacity - tail

        record_event(
            "gap::grow",
            level="debug",
            data={
                "from": old_capacity,
                "to": new_capacity,
                "needed": needed,
                "length": len(self),
            },
            logger_name=self._logger_name,
        )

    # Mutation

    def insert(self, offset: int, data: bytes) -> None:
        """Insert ``data`` so that it starts at logical ``offset``."""

        payload = _as_bytes(data)
        offset = ensure_offset(offset, len(self))
        if not payload:
            return

        self.move_gap_to(offset)
        self.ensure_gap(len(payload))
        end = self._gap_start + len(payload)
        self._block[self._gap_start : end] = payload
        self._gap_start = end
        self._version += 1

    def delete(self, offset: int, count: int) -> None:
        """Remove ``count`` bytes starting at logical ``offset``."""

        offset, count = ensure_span(offset, count, len(self))
        if count == 0:
            return

        self.move_gap_to(offset)
        self._gap_end += count
        self._version += 1

    # Reads

    def byte_at(self, offset: int) -> int:
        offset = operator.index(offset)
        length = len(self)
        if offset < 0 or offset >= length:
            raise OutOfRangeError(
                f"offset {offset} outside [0, {length})", offset=offset, limit=length
            )
        if offset < self._gap_start:
            return self._block[offset]
        return self._block[offset + self.gap_size]

    def slice(self, offset: int, length: int) -> bytes:
        start, count = ensure_span(offset, length, len(self))
        end = start + count
        gap_start, gap = self._gap_start, self.gap_size

        if end <= gap_start:
            return bytes(self._block[start:end])
        if start >= gap_start:
            return bytes(self._block[start + gap : end + gap])
        return bytes(self._block[start:gap_start]) + bytes(
            self._block[self._gap_end : end + gap]
        )

    def to_bytes(self) -> bytes:
        """Logical content with the gap squeezed out."""

        return bytes(self._block[: self._gap_start]) + bytes(
            self._block[self._gap_end :]
        )

    def find_byte(self, value: int, start: int = 0) -> int:
        """Logical offset of the first ``value`` byte at or after ``start``, or -1."""

        start = ensure_offset(start, len(self), what="start")
        gap_start, gap = self._gap_start, self.gap_size
        if start < gap_start:
            hit = self._block.find(value, start, gap_start)
            if hit >= 0:
                return hit
            start = gap_start
        hit = self._block.find(value, start + gap)
        return hit - gap if hit >= 0 else -1

    def iter_bytes(self, start: int = 0) -> Iterator[int]:
        """Lazily yield logical bytes from ``start``.

        The gap may move between steps; changing the content does not and
        raises ``RuntimeError`` on the next step.
        """

        start = ensure_offset(start, len(self), what="start")
        return self._iter_from(start, self._version)

    def _iter_from(self, offset: int, version: int) -> Iterator[int]:
        while True:
            if self._version != version:
                raise RuntimeError("buffer mutated during iteration")
            if offset >= len(self):
                return
            if offset < self._gap_start:
                yield self._block[offset]
            else:
                yield self._block[offset + self.gap_size]
            offset += 1

    def __iter__(self) -> Iterator[int]:
        return self.iter_bytes()

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def __str__(self) -> str:
        return self.to_bytes().decode("utf-8", errors="replace")

    def __repr__(self) -> str:
        return (
            f"GapBuffer(length={len(self)}, capacity={self.capacity}, "
            f"gap=[{self._gap_start}, {self._gap_end}))"
        )

    def check_invariants(self, expected_length: Optional[int] = None) -> None:
        """Raise ``AssertionError`` if the gap bounds or the length are off.

        ``expected_length`` is the length the caller believes the document
        has, e.g. inserted minus deleted byte counts.
        """

        capacity = len(self._block)
        if not 0 <= self._gap_start <= self._gap_end <= capacity:
            raise AssertionError(
                f"gap [{self._gap_start}, {self._gap_end}) escapes block of {capacity}"
            )
        length = self._gap_start + (capacity - self._gap_end)
        exported = len(self.to_bytes())
        if length != exported:
            raise AssertionError(
                f"gap bounds give {length} bytes, content has {exported}"
            )
        if expected_length is not None and length != expected_length:
            raise AssertionError(
                f"document holds {length} bytes, expected {expected_length}"
            )

    # Position queries, see PositionIndex

    def codepoint_to_byte(self, n: int) -> int:
        return self.index.codepoint_to_byte(n)

    def byte_to_codepoint(self, offset: int) -> int:
        return self.index.byte_to_codepoint(offset)

    def codepoint_count(self) -> int:
        return self.index.codepoint_count()

    def line_start_offsets(self) -> LineStarts:
        return self.index.line_start_offsets()

    def byte_to_line_col(self, offset: int) -> LinePosition:
        return self.index.byte_to_line_col(offset)

    def line_count(self) -> int:
        return self.index.line_count()

    def line_to_byte(self, line: int) -> int:
        return self.index.line_to_byte(line)

    def line_col_to_byte(self, line: int, col: int) -> int:
        return self.index.line_col_to_byte(line, col)

    def line_bytes(self, line: int) -> bytes:
        return self.index.line_bytes(line)


__all__ = ["GapBuffer"]
