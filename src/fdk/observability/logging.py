from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol, TextIO, runtime_checkable

LEVELS = {"debug": 10, "info": 20, "warning": 30, "error": 40}


@dataclass(frozen=True, slots=True)
class LogMessage:
    # Structured log record emitted by the runtime.
    level: str
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    fields: dict[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.level or not self.message:
            raise ValueError("LogMessage requires non-empty level/message")
        if self.level not in LEVELS:
            raise ValueError(f"Unknown log level: {self.level}")


@runtime_checkable
class LogSink(Protocol):
    def emit(self, message: LogMessage) -> None:
        raise NotImplementedError("LogSink is a port; use a concrete sink.")


class StderrLogSink:
    # Compact JSON lines on stderr; stdout belongs to the wire protocol.
    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def emit(self, message: LogMessage) -> None:
        stream = self._stream if self._stream is not None else sys.stderr
        stream.write(json.dumps(_log_to_dict(message), separators=(",", ":"), ensure_ascii=False, default=str) + "\n")
        stream.flush()


class JsonlLogSink:
    # File-backed structured log sink.
    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self._path.open("a", encoding="utf-8")

    def emit(self, message: LogMessage) -> None:
        payload = json.dumps(_log_to_dict(message), separators=(",", ":"), ensure_ascii=False, default=str)
        self._file.write(payload + "\n")
        self._file.flush()

    def close(self) -> None:
        self._file.close()


class InMemoryLogSink:
    # Collects records for the testbench and unit tests.
    def __init__(self) -> None:
        self.records: list[LogMessage] = []

    def emit(self, message: LogMessage) -> None:
        self.records.append(message)

    def messages(self, level: str | None = None) -> list[str]:
        return [r.message for r in self.records if level is None or r.level == level]


@dataclass(slots=True)
class FunctionLogger:
    # Level-filtering facade over a sink.
    sink: LogSink
    level: str = "info"

    def __post_init__(self) -> None:
        if self.level not in LEVELS:
            raise ValueError(f"Unknown log level: {self.level}")

    def log(self, level: str, message: str, **fields: object) -> None:
        if LEVELS[level] < LEVELS[self.level]:
            return
        self.sink.emit(LogMessage(level=level, message=message, fields=fields))

    def debug(self, message: str, **fields: object) -> None:
        self.log("debug", message, **fields)

    def info(self, message: str, **fields: object) -> None:
        self.log("info", message, **fields)

    def warning(self, message: str, **fields: object) -> None:
        self.log("warning", message, **fields)

    def error(self, message: str, **fields: object) -> None:
        self.log("error", message, **fields)


def _log_to_dict(message: LogMessage) -> dict[str, object]:
    return {
        "level": message.level,
        "message": message.message,
        "timestamp": message.timestamp.isoformat().replace("+00:00", "Z"),
        "fields": message.fields,
    }
