from __future__ import annotations

from dataclasses import dataclass, field
from typing import BinaryIO, Protocol, runtime_checkable
from urllib.parse import urlsplit

from fdk.contract.detector import Contract, Mode
from fdk.wire.codec import read_request, write_response
from fdk.wire.headers import Headers
from fdk.wire.messages import Request, Response


@runtime_checkable
class Channel(Protocol):
    # Per-mode request source and response sink used by the invocation runtime.
    def next_request(self) -> Request | None:
        raise NotImplementedError("Channel is a port; use DefaultChannel or HttpChannel.")

    def write(self, response: Response) -> None:
        raise NotImplementedError("Channel is a port; use DefaultChannel or HttpChannel.")


@dataclass
class HttpChannel(Channel):
    # Hot contract: framed requests in, framed responses out, until end-of-stream.
    input: BinaryIO
    output: BinaryIO
    max_header_bytes: int
    max_body_bytes: int | None = None

    def next_request(self) -> Request | None:
        return read_request(self.input, max_header_bytes=self.max_header_bytes, max_body_bytes=self.max_body_bytes)

    def write(self, response: Response) -> None:
        write_response(self.output, response)


@dataclass
class DefaultChannel(Channel):
    # Default contract: the whole input is one body; only the response body is written back.
    input: BinaryIO
    output: BinaryIO
    method: str
    request_url: str
    headers: tuple[tuple[str, str], ...] = ()
    _consumed: bool = field(default=False, init=False, repr=False)

    def next_request(self) -> Request | None:
        if self._consumed:
            return None
        self._consumed = True
        body = self.input.read()
        return Request(
            method=self.method,
            target=request_target(self.request_url),
            headers=Headers(self.headers),
            body=body or b"",
        )

    def write(self, response: Response) -> None:
        # Status and headers cannot be expressed in this contract.
        self.output.write(response.body)
        self.output.flush()


def open_channel(contract: Contract, input: BinaryIO, output: BinaryIO) -> Channel:
    if contract.mode is Mode.HTTP:
        return HttpChannel(
            input=input,
            output=output,
            max_header_bytes=contract.settings.max_header_bytes,
            max_body_bytes=contract.settings.max_body_bytes,
        )
    assert contract.method is not None and contract.request_url is not None
    return DefaultChannel(
        input=input,
        output=output,
        method=contract.method,
        request_url=contract.request_url,
        headers=contract.headers,
    )


def request_target(url: str) -> str:
    # http://host/r/app/fn?x=1 -> /r/app/fn?x=1
    parts = urlsplit(url)
    target = parts.path or "/"
    if parts.query:
        target = f"{target}?{parts.query}"
    return target
