from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import TextIO

from fdk.config.settings import ContractSettings
from fdk.wire.headers import Headers


@dataclass(frozen=True, slots=True)
class LogFramer:
    # Marks the start of each invocation in the error channel so the platform can split logs per call.
    name: str
    header: str
    stream: TextIO | None = None

    @classmethod
    def from_settings(cls, settings: ContractSettings, stream: TextIO | None = None) -> LogFramer | None:
        if not settings.log_framing_enabled:
            return None
        assert settings.logframe_name is not None and settings.logframe_hdr is not None
        return cls(name=settings.logframe_name, header=settings.logframe_hdr, stream=stream)

    def frame(self, headers: Headers) -> str | None:
        # Nothing is written when the request lacks the configured header.
        value = headers.get(self.header)
        if not value:
            return None
        line = f"\n{self.name}={value}\n"
        stream = self.stream if self.stream is not None else sys.stderr
        stream.write(line)
        stream.flush()
        return line
