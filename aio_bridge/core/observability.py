"""Structured event sinks for bridge lifecycle and request events.

イベントは ``emit(event_type, record)`` で渡され、1 イベント 1 行の JSON
として書き出される。シンクの障害はブリッジ本体へ伝播させない。
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
import json
import logging
from pathlib import Path
import sys
from threading import Lock
from typing import Any, Protocol, TextIO

PathLike = str | Path

LOGGER = logging.getLogger(__name__)


class EventLogger(Protocol):
    """Protocol for structured event loggers."""

    def emit(self, event_type: str, record: Mapping[str, Any]) -> None:
        """Persist ``record`` for ``event_type``."""


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, BaseException):
        return f"{type(value).__name__}: {value}"
    raise TypeError(f"{type(value).__name__} is not JSON serializable")


def encode_event(event_type: str, record: Mapping[str, Any]) -> str:
    """Render one event as a JSON line; ``record['event']`` wins if present."""

    payload = {"event": event_type, **record}
    return json.dumps(payload, ensure_ascii=False, default=_json_default) + "\n"


class JsonlLogger:
    """Append events to a JSONL file, creating parent directories on demand."""

    def __init__(self, path: PathLike) -> None:
        self._path = Path(path)
        self._lock = Lock()

    @property
    def path(self) -> Path:
        return self._path

    def emit(self, event_type: str, record: Mapping[str, Any]) -> None:
        line = encode_event(event_type, record)
        with self._lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(line)


class StdLogger:
    """Write events to a text stream (stdout by default)."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdout
        self._lock = Lock()

    def emit(self, event_type: str, record: Mapping[str, Any]) -> None:
        line = encode_event(event_type, record)
        with self._lock:
            self._stream.write(line)
            self._stream.flush()


class CompositeLogger:
    """Fan out to several sinks; one failing sink does not starve the rest."""

    def __init__(self, loggers: Iterable[EventLogger] | None = None) -> None:
        self._loggers: list[EventLogger] = list(loggers or ())
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._loggers)

    def add(self, logger: EventLogger) -> None:
        with self._lock:
            self._loggers.append(logger)

    def emit(self, event_type: str, record: Mapping[str, Any]) -> None:
        with self._lock:
            targets = tuple(self._loggers)
        for target in targets:
            emit_safely(target, event_type, record)


def emit_safely(
    logger: EventLogger | None, event_type: str, record: Mapping[str, Any]
) -> None:
    """Emit ``record`` and log, rather than raise, sink failures."""

    if logger is None:
        return
    try:
        logger.emit(event_type, record)
    except Exception:  # noqa: BLE001 - シンク障害の分離
        LOGGER.exception("event logger %r failed for %s", logger, event_type)


__all__ = [
    "EventLogger",
    "JsonlLogger",
    "StdLogger",
    "CompositeLogger",
    "emit_safely",
    "encode_event",
]
