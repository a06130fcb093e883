from __future__ import annotations

from dataclasses import dataclass, field

from fdk.coercion.content_type import ContentType
from fdk.config.settings import ContractSettings
from fdk.config.store import ConfigStore
from fdk.contract.detector import Mode
from fdk.errors import FunctionError
from fdk.wire.headers import Headers
from fdk.wire.messages import Request


@dataclass(frozen=True, slots=True)
class RuntimeContext:
    # Read-only view of configuration handed to the initializer.
    config: ConfigStore
    settings: ContractSettings
    mode: Mode

    def get(self, key: str) -> str | None:
        return self.config.get(key)

    @property
    def app_id(self) -> str:
        return self.config.get("FN_APP_ID", "") or ""

    @property
    def function_id(self) -> str:
        return self.config.get("FN_FN_ID", "") or ""

    @property
    def app_name(self) -> str:
        return self.config.get("FN_APP_NAME", "") or ""

    @property
    def function_name(self) -> str:
        return self.config.get("FN_FN_NAME", "") or ""

    @property
    def memory_mb(self) -> int | None:
        return self.settings.memory_mb


@dataclass(slots=True)
class InvocationContext:
    # Per-request metadata plus the response status/headers a handler may adjust.
    runtime: RuntimeContext
    request: Request
    request_url: str
    response_headers: Headers = field(default_factory=Headers)
    status_code: int | None = None

    @classmethod
    def for_request(cls, runtime: RuntimeContext, request: Request, *, default_url: str | None = None) -> InvocationContext:
        url = request.headers.get("Fn-Http-Request-Url") or default_url or request.target
        return cls(runtime=runtime, request=request, request_url=url)

    @property
    def config(self) -> ConfigStore:
        return self.runtime.config

    @property
    def is_http_request(self) -> bool:
        # Fn-Intent: httprequest marks a call forwarded by the HTTP gateway.
        return (self.request.headers.get("Fn-Intent") or "").lower() == "httprequest"

    @property
    def headers(self) -> Headers:
        # Gateway calls expose only the forwarded client headers and the body type.
        if not self.is_http_request:
            return self.request.headers
        return Headers(
            (name, value)
            for name, value in self.request.headers.items()
            if name.lower() == "content-type" or name.lower().startswith("fn-http-h-")
        )

    def header(self, name: str) -> str | None:
        return self.headers.get(name)

    @property
    def method(self) -> str:
        # Gateway-forwarded method wins over the framing method.
        return self.request.headers.get("Fn-Http-Method") or self.request.method

    @property
    def call_id(self) -> str:
        return self.request.headers.get("Fn-Call-Id") or self.runtime.settings.call_id or ""

    @property
    def content_type(self) -> ContentType:
        return ContentType.from_header(self.request.headers.get("Content-Type"))

    @property
    def accept_type(self) -> ContentType:
        accept = self.request.headers.get("Fn-Http-H-Accept") or self.request.headers.get("Accept")
        return ContentType.from_header(accept)

    def add_response_header(self, key: str, value: str) -> None:
        try:
            self.response_headers.add(key, value)
        except ValueError as exc:
            raise FunctionError.internal(f"Invalid response header {key!r}: {exc}") from exc

    def set_status_code(self, status: int) -> None:
        # Defaults to 200 when never called.
        if not isinstance(status, int) or not 100 <= status <= 599:
            raise FunctionError.invalid_input("Invalid http code added")
        self.status_code = status
