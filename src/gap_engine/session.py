"""Editing session: the explicit owner of every open buffer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from gap_engine.buffer import EditCursor, GapBuffer
from gap_engine.config import BufferConfig
from gap_engine.runtime.telemetry import span


@dataclass(slots=True)
class SessionStats:
    """Snapshot of what a session currently holds."""

    buffer_count: int
    total_bytes: int
    active: Optional[str]


class EditSession:
    """Owns named buffers and their cursors.

    The command layer receives the session by reference instead of reaching
    for editor-wide globals. Closing a buffer drops the session's only
    reference to its storage.
    """

    def __init__(
        self,
        *,
        config: Optional[BufferConfig] = None,
        logger_name: Optional[str] = None,
    ) -> None:
        self.config = config or BufferConfig()
        self._buffers: Dict[str, GapBuffer] = {}
        self._cursors: Dict[str, EditCursor] = {}
        self._active: Optional[str] = None
        self._logger_name = logger_name

    def open(self, name: str, initial: bytes = b"") -> GapBuffer:
        with span(
            "session::open",
            logger_name=self._logger_name,
            component="session",
            metadata={"buffer": name},
        ) as handle:
            if not name:
                raise ValueError("buffer name cannot be empty")
            if name in self._buffers:
                raise ValueError(f"Buffer '{name}' is already open")

            buffer = GapBuffer(
                initial, config=self.config, logger_name=self._logger_name
            )
            handle.add_metadata("length", len(buffer))
            self._buffers[name] = buffer
            self._cursors[name] = EditCursor(buffer, logger_name=self._logger_name)
            if self._active is None:
                self._active = name
            return buffer

    def get(self, name: str) -> GapBuffer:
        try:
            return self._buffers[name]
        except KeyError as exc:
            raise KeyError(f"Buffer '{name}' is not open") from exc

    def close(self, name: str) -> GapBuffer:
        with span(
            "session::close",
            logger_name=self._logger_name,
            component="session",
            metadata={"buffer": name},
        ):
            buffer = self.get(name)
            del self._buffers[name]
            del self._cursors[name]
            if self._active == name:
                self._active = next(iter(self._buffers), None)
            return buffer

    def switch(self, name: str) -> GapBuffer:
        buffer = self.get(name)
        self._active = name
        return buffer

    @property
    def active_name(self) -> Optional[str]:
        return self._active

    @property
    def active(self) -> Optional[GapBuffer]:
        if self._active is None:
            return None
        return self._buffers[self._active]

    def cursor(self, name: Optional[str] = None) -> EditCursor:
        target = name if name is not None else self._active
        if target is None:
            raise KeyError("No buffer is open")
        self.get(target)
        return self._cursors[target]

    def names(self) -> tuple[str, ...]:
        return tuple(self._buffers)

    def stats(self) -> SessionStats:
        return SessionStats(
            buffer_count=len(self._buffers),
            total_bytes=sum(len(buffer) for buffer in self._buffers.values()),
            active=self._active,
        )

    def __contains__(self, name: object) -> bool:
        return name in self._buffers

    def __len__(self) -> int:
        return len(self._buffers)

    def __iter__(self) -> Iterator[str]:
        return iter(self._buffers)


__all__ = ["EditSession", "SessionStats"]
