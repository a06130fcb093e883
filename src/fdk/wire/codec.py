from __future__ import annotations

import re
import sys
from typing import BinaryIO

from fdk.config.settings import DEFAULT_MAX_HEADER_BYTES
from fdk.errors import DecodeError
from fdk.wire.headers import Headers
from fdk.wire.messages import Request, Response, is_token

# HTTP/1.1-shaped framing over a single byte stream (request/status line, headers, sized body).

_VERSION = re.compile(r"HTTP/\d\.\d")
_STATUS = re.compile(r"\d{3}")
_HEADER_ENCODING = "latin-1"
_READ_CHUNK = 64 * 1024


def read_request(
    stream: BinaryIO,
    *,
    max_header_bytes: int = DEFAULT_MAX_HEADER_BYTES,
    max_body_bytes: int | None = None,
) -> Request | None:
    # None means the stream ended cleanly on a message boundary.
    head = _read_head(stream, max_header_bytes)
    if head is None:
        return None
    start, header_lines = head[0], head[1:]
    parts = start.split(" ")
    if len(parts) != 3:
        raise DecodeError(f"Malformed request line: {start!r}")
    method, target, version = parts
    if not is_token(method) or not target or not _VERSION.fullmatch(version):
        raise DecodeError(f"Malformed request line: {start!r}")
    headers = _parse_headers(header_lines)
    body = _read_exact(stream, _content_length(headers, max_body_bytes))
    return Request(method=method, target=target, headers=headers, body=body, version=version)


def read_response(
    stream: BinaryIO,
    *,
    max_header_bytes: int = DEFAULT_MAX_HEADER_BYTES,
    max_body_bytes: int | None = None,
) -> Response | None:
    head = _read_head(stream, max_header_bytes)
    if head is None:
        return None
    start, header_lines = head[0], head[1:]
    parts = start.split(" ", 2)
    if len(parts) < 2 or not _VERSION.fullmatch(parts[0]) or not _STATUS.fullmatch(parts[1]):
        raise DecodeError(f"Malformed status line: {start!r}")
    headers = _parse_headers(header_lines)
    body = _read_exact(stream, _content_length(headers, max_body_bytes))
    return Response(status=int(parts[1]), headers=headers, body=body, version=parts[0])


def write_response(stream: BinaryIO, response: Response) -> None:
    # One write + flush per message so the peer sees the boundary immediately.
    stream.write(encode_response(response))
    stream.flush()


def write_request(stream: BinaryIO, request: Request) -> None:
    stream.write(encode_request(request))
    stream.flush()


def encode_response(response: Response) -> bytes:
    # Content-Length is always computed from the body; a supplied one is replaced.
    headers = response.headers.copy()
    headers.remove("Content-Length")
    headers.add("Content-Length", str(len(response.body)))
    start = f"{response.version} {response.status} {response.reason}".rstrip(" ")
    return _render(start, headers, response.body)


def encode_request(request: Request) -> bytes:
    # An explicit Content-Length is written verbatim so broken framing can be fabricated.
    headers = request.headers.copy()
    if "Content-Length" not in headers:
        headers.add("Content-Length", str(len(request.body)))
    return _render(f"{request.method} {request.target} {request.version}", headers, request.body)


def _render(start: str, headers: Headers, body: bytes) -> bytes:
    lines = [start]
    lines.extend(f"{name}: {value}" for name, value in headers.items())
    head = "\r\n".join(lines) + "\r\n\r\n"
    return head.encode(_HEADER_ENCODING) + body


def _read_head(stream: BinaryIO, max_header_bytes: int) -> list[str] | None:
    budget = max_header_bytes
    lines: list[str] = []
    while True:
        raw = stream.readline(budget + 1)
        if not raw:
            if not lines:
                return None
            raise DecodeError("Stream ended inside a header block")
        budget -= len(raw)
        if budget < 0:
            raise DecodeError(f"Header block exceeds {max_header_bytes} bytes")
        if not raw.endswith(b"\n"):
            raise DecodeError("Stream ended inside a header line")
        line = raw[:-1]
        if line.endswith(b"\r"):
            line = line[:-1]
        if not line:
            if not lines:
                # Blank lines between messages are tolerated.
                continue
            return lines
        lines.append(line.decode(_HEADER_ENCODING))


def _parse_headers(lines: list[str]) -> Headers:
    headers = Headers()
    for line in lines:
        if line[:1] in (" ", "\t"):
            raise DecodeError(f"Folded header lines are not supported: {line!r}")
        name, sep, value = line.partition(":")
        if not sep or not name or name != name.strip():
            raise DecodeError(f"Malformed header line: {line!r}")
        try:
            headers.add(name, value.strip(" \t"))
        except ValueError as exc:
            raise DecodeError(f"Malformed header line: {line!r}") from exc
    return headers


def _content_length(headers: Headers, max_body_bytes: int | None = None) -> int:
    if "Transfer-Encoding" in headers:
        raise DecodeError("Transfer-Encoding is not supported; a Content-Length is required")
    values = {part.strip() for value in headers.get_all("Content-Length") for part in value.split(",")}
    if not values:
        return 0
    if len(values) > 1:
        raise DecodeError(f"Conflicting Content-Length values: {sorted(values)}")
    raw = values.pop()
    if not raw.isascii() or not raw.isdigit():
        raise DecodeError(f"Invalid Content-Length: {raw!r}")
    size = int(raw)
    if size > sys.maxsize:
        raise DecodeError(f"Invalid Content-Length: {raw!r}")
    if max_body_bytes is not None and size > max_body_bytes:
        raise DecodeError(f"Body of {size} bytes exceeds {max_body_bytes} bytes")
    return size


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    # Bounded reads; the declared size is only trusted as far as the stream delivers.
    chunks: list[bytes] = []
    remaining = size
    while remaining > 0:
        chunk = stream.read(min(remaining, _READ_CHUNK))
        if not chunk:
            raise DecodeError(f"Stream ended inside a body: expected {size} bytes, got {size - remaining}")
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)
