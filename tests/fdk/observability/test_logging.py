from __future__ import annotations

import io
import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from fdk.config.settings import load_settings
from fdk.observability.log_framing import LogFramer
from fdk.observability.logging import FunctionLogger, InMemoryLogSink, JsonlLogSink, LogMessage, LogSink, StderrLogSink
from fdk.wire.headers import Headers


def test_log_message_requires_known_level_and_text() -> None:
    with pytest.raises(ValueError):
        LogMessage(level="", message="x")
    with pytest.raises(ValueError, match="Unknown log level"):
        LogMessage(level="trace", message="x")


def test_function_logger_filters_below_threshold() -> None:
    sink = InMemoryLogSink()
    logger = FunctionLogger(sink, level="warning")
    logger.debug("hidden")
    logger.info("hidden")
    logger.warning("shown", call_id="c1")
    logger.error("also shown")
    assert sink.messages() == ["shown", "also shown"]
    assert sink.records[0].fields == {"call_id": "c1"}
    assert sink.messages("error") == ["also shown"]


def test_function_logger_rejects_unknown_level() -> None:
    with pytest.raises(ValueError):
        FunctionLogger(InMemoryLogSink(), level="loud")


def test_stderr_sink_writes_json_lines() -> None:
    # stdout is reserved for the wire; records go to the error stream.
    stream = io.StringIO()
    sink = StderrLogSink(stream)
    stamp = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
    sink.emit(LogMessage(level="info", message="ready", timestamp=stamp, fields={"seq": 1}))
    record = json.loads(stream.getvalue().splitlines()[0])
    assert record == {"level": "info", "message": "ready", "timestamp": "2024-01-02T03:04:05Z", "fields": {"seq": 1}}


def test_jsonl_sink_appends_to_file(tmp_path: Path) -> None:
    path = tmp_path / "logs" / "fdk.jsonl"
    sink = JsonlLogSink(path)
    sink.emit(LogMessage(level="error", message="first"))
    sink.emit(LogMessage(level="debug", message="second"))
    sink.close()
    lines = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [line["message"] for line in lines] == ["first", "second"]


def test_sinks_satisfy_the_sink_port(tmp_path: Path) -> None:
    jsonl = JsonlLogSink(tmp_path / "x.jsonl")
    for sink in (StderrLogSink(io.StringIO()), InMemoryLogSink(), jsonl):
        assert isinstance(sink, LogSink)
    jsonl.close()


def test_log_framer_requires_both_settings() -> None:
    assert LogFramer.from_settings(load_settings({"FN_LOGFRAME_NAME": "id"})) is None
    framer = LogFramer.from_settings(load_settings({"FN_LOGFRAME_NAME": "id", "FN_LOGFRAME_HDR": "Fn-Call-Id"}))
    assert framer is not None
    assert (framer.name, framer.header) == ("id", "Fn-Call-Id")


def test_log_framer_writes_marker_only_when_header_present() -> None:
    stream = io.StringIO()
    framer = LogFramer(name="call", header="Fn-Call-Id", stream=stream)
    assert framer.frame(Headers({"fn-call-id": "01XYZ"})) == "\ncall=01XYZ\n"
    assert framer.frame(Headers()) is None
    assert stream.getvalue() == "\ncall=01XYZ\n"
