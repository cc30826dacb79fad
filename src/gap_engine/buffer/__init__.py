"""Gap buffer storage, position translation, and cursor editing."""

from .cursor import EditCursor
from .gap import GapBuffer
from .index import LinePosition, LineStarts, PositionIndex, sequence_length
from .validation import OutOfRangeError, ensure_offset, ensure_span

__all__ = [
    "EditCursor",
    "GapBuffer",
    "LinePosition",
    "LineStarts",
    "OutOfRangeError",
    "PositionIndex",
    "ensure_offset",
    "ensure_span",
    "sequence_length",
]
