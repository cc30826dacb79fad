"""Offset validation shared by the buffer, index, and cursor layers."""

from __future__ import annotations

import operator
from typing import Optional


class OutOfRangeError(IndexError):
    """Raised when an offset, count, or line lies outside the document."""

    def __init__(
        self,
        message: str,
        *,
        offset: int,
        length: Optional[int] = None,
        limit: int,
    ) -> None:
        super().__init__(message)
        self.offset = offset
        self.length = length
        self.limit = limit


def ensure_offset(offset: int, limit: int, *, what: str = "offset") -> int:
    """Return ``offset`` as an int if ``0 <= offset <= limit``."""

    value = operator.index(offset)
    if value < 0 or value > limit:
        raise OutOfRangeError(
            f"{what} {value} outside [0, {limit}]", offset=value, limit=limit
        )
    return value


def ensure_span(offset: int, length: int, limit: int) -> tuple[int, int]:
    """Return ``(offset, length)`` if the span fits inside ``[0, limit]``."""

    start = operator.index(offset)
    count = operator.index(length)
    if start < 0 or count < 0 or start + count > limit:
        raise OutOfRangeError(
            f"span [{start}, {start + count}) outside [0, {limit}]",
            offset=start,
            length=count,
            limit=limit,
        )
    return start, count
