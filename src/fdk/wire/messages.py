from __future__ import annotations

import re
from dataclasses import dataclass, field
from http import HTTPStatus

from fdk.wire.headers import Headers

DEFAULT_TARGET = "/"
_TOKEN = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


def is_token(value: str) -> bool:
    # HTTP token grammar, used for request methods.
    return bool(_TOKEN.fullmatch(value))


@dataclass(frozen=True, slots=True)
class Request:
    # One decoded invocation request; consumed exactly once by the runtime.
    method: str = "POST"
    target: str = DEFAULT_TARGET
    headers: Headers = field(default_factory=Headers)
    body: bytes = b""
    version: str = "HTTP/1.1"

    def __post_init__(self) -> None:
        if not isinstance(self.method, str) or not is_token(self.method):
            raise ValueError(f"Invalid request method: {self.method!r}")
        if not isinstance(self.body, bytes):
            raise TypeError("Request.body must be bytes")
        if not isinstance(self.headers, Headers):
            object.__setattr__(self, "headers", Headers(self.headers))

    @classmethod
    def simple(cls, body: bytes | str, *, content_type: str | None = None) -> Request:
        # Plain POST with only a body, the shape the platform uses for most calls.
        payload = body.encode("utf-8") if isinstance(body, str) else body
        headers = Headers()
        if content_type is not None:
            headers.add("Content-Type", content_type)
        return cls(headers=headers, body=payload)


@dataclass(frozen=True, slots=True)
class Response:
    # One encoded invocation result; consumed exactly once by the codec.
    status: int = 200
    headers: Headers = field(default_factory=Headers)
    body: bytes = b""
    version: str = "HTTP/1.1"

    def __post_init__(self) -> None:
        if not isinstance(self.status, int) or not 100 <= self.status <= 599:
            raise ValueError(f"Invalid response status: {self.status!r}")
        if not isinstance(self.body, bytes):
            raise TypeError("Response.body must be bytes")
        if not isinstance(self.headers, Headers):
            object.__setattr__(self, "headers", Headers(self.headers))

    @property
    def reason(self) -> str:
        try:
            return HTTPStatus(self.status).phrase
        except ValueError:
            return ""

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300
