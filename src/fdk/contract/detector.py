from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlsplit

from fdk.config.settings import ContractSettings, load_settings
from fdk.errors import ContractError

_HEADER_PREFIX = "fn_header_"
_METHOD = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
_UNSUPPORTED_FORMATS = {"http-stream", "json", "cloudevent"}


class Mode(str, Enum):
    # DEFAULT: one invocation per process, exit code is the outcome.
    # HTTP: hot process serving framed requests until end-of-stream.
    DEFAULT = "default"
    HTTP = "http"


@dataclass(frozen=True, slots=True)
class Contract:
    # Result of detection; fixed for the lifetime of the process.
    mode: Mode
    settings: ContractSettings
    method: str | None = None
    request_url: str | None = None
    headers: tuple[tuple[str, str], ...] = ()

    @property
    def is_hot(self) -> bool:
        return self.mode is Mode.HTTP


def detect_contract(environ: Mapping[str, str] | None = None) -> Contract:
    # Reads FN_FORMAT and, for the default contract, the request description variables.
    env = dict(os.environ if environ is None else environ)
    settings = load_settings(env)
    fmt = settings.format
    if fmt in {"", "default"}:
        return _default_contract(env, settings)
    if fmt == "http":
        return Contract(mode=Mode.HTTP, settings=settings)
    if fmt in _UNSUPPORTED_FORMATS:
        raise ContractError(f"Unsupported FN_FORMAT specified: {fmt}")
    raise ContractError(f"Unrecognized FN_FORMAT specified: {fmt}")


def _default_contract(env: dict[str, str], settings: ContractSettings) -> Contract:
    method = settings.method
    if method is None:
        raise ContractError("Fatal: FN_METHOD not set.")
    if not _METHOD.fullmatch(method):
        raise ContractError("Fatal: FN_METHOD set to an invalid HTTP method.")
    url = settings.request_url
    if url is None:
        raise ContractError("Fatal: FN_REQUEST_URL not set.")
    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise ContractError("Fatal: FN_REQUEST_URL set to an invalid URL.") from exc
    if (not parts.path and not parts.netloc) or any(ch.isspace() for ch in url):
        raise ContractError("Fatal: FN_REQUEST_URL set to an invalid URL.")
    return Contract(
        mode=Mode.DEFAULT,
        settings=settings,
        method=method.upper(),
        request_url=url,
        headers=default_headers(env),
    )


def default_headers(env: Mapping[str, str]) -> tuple[tuple[str, str], ...]:
    # FN_HEADER_Content_Type=text/plain -> ("Content-Type", "text/plain"), sorted for determinism.
    headers: list[tuple[str, str]] = []
    for key in sorted(env):
        if key.lower().startswith(_HEADER_PREFIX) and len(key) > len(_HEADER_PREFIX):
            name = key[len(_HEADER_PREFIX):].replace("_", "-")
            headers.append((name, env[key]))
    return tuple(headers)
