from __future__ import annotations

import json
from functools import lru_cache
from typing import Any
from urllib.parse import parse_qsl, urlencode

import yaml
from pydantic import TypeAdapter, ValidationError

from fdk.coercion.content_type import ContentType
from fdk.errors import FunctionError


def body_as_text(body: bytes) -> str:
    # Strict UTF-8; failure is a coercion error, not a business-logic error.
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FunctionError.coercion(f"Request body is not valid UTF-8: {exc.reason} at byte {exc.start}") from exc


def decode_input(body: bytes, input_type: Any, content_type: ContentType = ContentType.JSON) -> Any:
    # Convert a raw body into the handler's declared input type.
    if input_type is bytes:
        return body
    if input_type is str:
        return body_as_text(body)
    parsed = _parse(body, content_type)
    if input_type is Any or input_type is object:
        return parsed
    try:
        return _adapter(input_type).validate_python(parsed)
    except ValidationError as exc:
        raise FunctionError.coercion(f"Error while deserializing request body: {_summary(exc)}") from exc


def encode_output(value: Any, accept: ContentType = ContentType.JSON) -> tuple[bytes, str | None]:
    # Returns (body, content type); None means the response carries no body.
    if value is None:
        return b"", None
    if isinstance(value, (bytes, bytearray)):
        return bytes(value), "application/octet-stream"
    if isinstance(value, str):
        return value.encode("utf-8"), ContentType.PLAIN.value
    if accept is ContentType.XML:
        raise FunctionError.coercion("XML responses are not supported")
    try:
        adapter = _adapter(type(value))
        if accept is ContentType.JSON:
            return adapter.dump_json(value), accept.value
        data = adapter.dump_python(value, mode="json")
    except (TypeError, ValueError) as exc:
        raise FunctionError.coercion(f"Error while serializing response body: {exc}") from exc
    if accept is ContentType.YAML:
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True).encode("utf-8"), accept.value
    if accept is ContentType.URLENCODED:
        if not isinstance(data, dict):
            raise FunctionError.coercion("Error while serializing response body: form encoding needs a mapping")
        return urlencode(data, doseq=True).encode("utf-8"), accept.value
    text = data if isinstance(data, str) else json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    return text.encode("utf-8"), accept.value


def _parse(body: bytes, content_type: ContentType) -> Any:
    if content_type is ContentType.XML:
        raise FunctionError.coercion("XML request bodies are not supported")
    text = body_as_text(body)
    if content_type is ContentType.PLAIN:
        return text
    if content_type is ContentType.URLENCODED:
        return dict(parse_qsl(text, keep_blank_values=True))
    if not text.strip():
        return None
    if content_type is ContentType.YAML:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise FunctionError.coercion(f"Error while deserializing request body: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise FunctionError.coercion(f"Error while deserializing request body: {exc}") from exc


@lru_cache(maxsize=256)
def _adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def _summary(exc: ValidationError) -> str:
    # First error only; full pydantic output is too noisy for a response body.
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
    more = f" (+{len(errors) - 1} more)" if len(errors) > 1 else ""
    return f"{loc}: {first.get('msg', 'invalid value')}{more}"
