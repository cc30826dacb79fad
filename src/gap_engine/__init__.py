"""Gap-buffer text storage for terminal editors."""

from .buffer import EditCursor, GapBuffer, LinePosition, OutOfRangeError
from .config import BufferConfig
from .session import EditSession, SessionStats

__all__ = [
    "BufferConfig",
    "EditCursor",
    "EditSession",
    "GapBuffer",
    "LinePosition",
    "OutOfRangeError",
    "SessionStats",
    "buffer",
    "config",
    "runtime",
    "session",
]

__version__ = "0.1.0"
