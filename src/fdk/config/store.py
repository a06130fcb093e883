from __future__ import annotations

import os
from collections.abc import Iterator, Mapping
from types import MappingProxyType


class ConfigStore(Mapping[str, str]):
    # Immutable configuration snapshot; built once at startup and only read afterwards.
    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, str] | None = None) -> None:
        # Empty values are dropped, matching how the platform injects optional config.
        source = {} if entries is None else entries
        for key, value in source.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise TypeError("ConfigStore keys and values must be str")
        self._entries = MappingProxyType({k: v for k, v in source.items() if v})

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> ConfigStore:
        return cls(os.environ if environ is None else environ)

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        return self._entries.get(key, default)

    def __getitem__(self, key: str) -> str:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __setattr__(self, name: str, value: object) -> None:
        # Only __init__ may bind the backing proxy.
        if hasattr(self, "_entries"):
            raise AttributeError("ConfigStore is read-only")
        object.__setattr__(self, name, value)

    def __repr__(self) -> str:
        return f"ConfigStore({dict(self._entries)!r})"
