from __future__ import annotations

from types import MappingProxyType

from fdk.errors import ExitCode, FunctionError, FunctionErrorKind
from fdk.wire.headers import Headers
from fdk.wire.messages import Response

# Mirrors the response status for gateways that only forward headers.
STATUS_HEADER = "Fn-Http-Status"

STATUS_BY_KIND = MappingProxyType(
    {
        FunctionErrorKind.INVALID_INPUT: 400,
        FunctionErrorKind.COERCION: 400,
        FunctionErrorKind.INITIALIZATION: 500,
        FunctionErrorKind.INTERNAL: 500,
    }
)

EXIT_CODE_BY_KIND = MappingProxyType(
    {
        FunctionErrorKind.INVALID_INPUT: ExitCode.INVALID_INPUT,
        FunctionErrorKind.COERCION: ExitCode.COERCION,
        FunctionErrorKind.INITIALIZATION: ExitCode.INITIALIZATION,
        FunctionErrorKind.INTERNAL: ExitCode.INTERNAL,
    }
)


def status_for(error: FunctionError) -> int:
    return STATUS_BY_KIND[error.kind]


def exit_code_for(error: FunctionError) -> ExitCode:
    return EXIT_CODE_BY_KIND[error.kind]


def error_body(message: str) -> bytes:
    # Plain text, always newline-terminated.
    text = message if message.endswith("\n") else message + "\n"
    return text.encode("utf-8")


def error_response(error: FunctionError, base_headers: Headers | None = None) -> Response:
    headers = Headers() if base_headers is None else base_headers.copy()
    status = status_for(error)
    headers.set("Content-Type", "text/plain; charset=utf-8")
    headers.set(STATUS_HEADER, str(status))
    return Response(status=status, headers=headers, body=error_body(error.message))
