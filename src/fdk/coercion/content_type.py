from __future__ import annotations

from enum import Enum


class ContentType(str, Enum):
    # Body formats understood by input/output coercion; value is the response media type.
    JSON = "application/json"
    YAML = "text/yaml"
    PLAIN = "text/plain"
    URLENCODED = "application/x-www-form-urlencoded"
    XML = "application/xml"

    @classmethod
    def from_header(cls, value: str | None) -> ContentType:
        # Parameters are ignored; unknown or absent media types fall back to JSON.
        if not value:
            return cls.JSON
        media = value.split(";", 1)[0].strip().lower()
        if media in _ALIASES:
            return _ALIASES[media]
        if media.endswith("+json"):
            return cls.JSON
        if media.endswith("+yaml"):
            return cls.YAML
        if media.endswith("+xml"):
            return cls.XML
        return cls.JSON


_ALIASES = {
    "application/json": ContentType.JSON,
    "text/json": ContentType.JSON,
    "application/yaml": ContentType.YAML,
    "application/x-yaml": ContentType.YAML,
    "text/yaml": ContentType.YAML,
    "text/x-yaml": ContentType.YAML,
    "text/plain": ContentType.PLAIN,
    "application/x-www-form-urlencoded": ContentType.URLENCODED,
    "application/xml": ContentType.XML,
    "text/xml": ContentType.XML,
}
