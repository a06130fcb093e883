from .log_framing import LogFramer
from .logging import FunctionLogger, InMemoryLogSink, JsonlLogSink, LogMessage, LogSink, StderrLogSink

__all__ = [
    "FunctionLogger",
    "InMemoryLogSink",
    "JsonlLogSink",
    "LogFramer",
    "LogMessage",
    "LogSink",
    "StderrLogSink",
]
