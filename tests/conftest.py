from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Tuple

import pytest

from gap_engine.runtime import telemetry


class RecordingLogger:
    """Stands in for a telelog logger and keeps every emitted record."""

    def __init__(self) -> None:
        self.records: List[Tuple[str, str, Dict[str, str]]] = []
        self.context: Dict[str, str] = {}

    def add_context(self, key: str, value: str) -> None:
        self.context[key] = value

    def remove_context(self, key: str) -> None:
        self.context.pop(key, None)

    @contextmanager
    def profile(self, name: str) -> Iterator[None]:
        yield

    @contextmanager
    def track_component(self, name: str) -> Iterator[None]:
        yield

    def _record(self, level: str, message: str, pairs: Any) -> None:
        self.records.append((level, message, dict(pairs)))

    def debug_with(self, message: str, pairs: Any) -> None:
        self._record("debug", message, pairs)

    def info_with(self, message: str, pairs: Any) -> None:
        self._record("info", message, pairs)

    def error_with(self, message: str, pairs: Any) -> None:
        self._record("error", message, pairs)

    def messages(self, level: str) -> List[Tuple[str, Dict[str, str]]]:
        return [(msg, data) for lvl, msg, data in self.records if lvl == level]


@pytest.fixture
def recording_logger(monkeypatch: pytest.MonkeyPatch) -> RecordingLogger:
    logger = RecordingLogger()
    monkeypatch.setattr(telemetry, "_ACTIVE_CONFIG", object())
    monkeypatch.setitem(telemetry._LOGGERS, telemetry.DEFAULT_LOGGER_NAME, logger)
    return logger
