from __future__ import annotations

from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from fdk.errors import ContractError

# Typed view over the FN_* / FDK_* keys of the process environment.

DEFAULT_MAX_HEADER_BYTES = 64 * 1024


class ContractSettings(BaseModel):
    # Everything else in the environment stays user configuration in ConfigStore.
    model_config = ConfigDict(extra="ignore", frozen=True)

    format: str = Field(default="", alias="FN_FORMAT")
    method: str | None = Field(default=None, alias="FN_METHOD")
    request_url: str | None = Field(default=None, alias="FN_REQUEST_URL")
    call_id: str | None = Field(default=None, alias="FN_CALL_ID")
    logframe_name: str | None = Field(default=None, alias="FN_LOGFRAME_NAME")
    logframe_hdr: str | None = Field(default=None, alias="FN_LOGFRAME_HDR")
    app_id: str = Field(default="", alias="FN_APP_ID")
    function_id: str = Field(default="", alias="FN_FN_ID")
    app_name: str = Field(default="", alias="FN_APP_NAME")
    function_name: str = Field(default="", alias="FN_FN_NAME")
    memory_mb: int | None = Field(default=None, alias="FN_MEMORY", ge=0)
    max_header_bytes: int = Field(default=DEFAULT_MAX_HEADER_BYTES, alias="FDK_MAX_HEADER_BYTES", gt=0)
    max_body_bytes: int | None = Field(default=None, alias="FDK_MAX_BODY_BYTES", gt=0)
    log_level: Literal["debug", "info", "warning", "error"] = Field(default="info", alias="FDK_LOG_LEVEL")
    log_path: str | None = Field(default=None, alias="FDK_LOG_PATH")

    @field_validator("format", mode="before")
    @classmethod
    def _normalize_format(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator(
        "method",
        "request_url",
        "call_id",
        "logframe_name",
        "logframe_hdr",
        "memory_mb",
        "max_body_bytes",
        "log_path",
        mode="before",
    )
    @classmethod
    def _empty_as_missing(cls, value: object) -> object:
        # The platform exports unset keys as empty strings.
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def log_framing_enabled(self) -> bool:
        return bool(self.logframe_name and self.logframe_hdr)


def load_settings(environ: Mapping[str, str]) -> ContractSettings:
    # Invalid FN_*/FDK_* values fail fast before any user code runs.
    try:
        return ContractSettings.model_validate(dict(environ))
    except ValidationError as exc:
        fields = ", ".join(str(err["loc"][0]) for err in exc.errors() if err.get("loc"))
        raise ContractError(f"Invalid function environment: {fields}") from exc
