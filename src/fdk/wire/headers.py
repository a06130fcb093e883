from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping


class Headers:
    # Ordered, case-insensitive, multi-valued header mapping (repeated headers keep every value).
    __slots__ = ("_items",)

    def __init__(
        self,
        items: Mapping[str, str | Iterable[str]] | Iterable[tuple[str, str]] | None = None,
    ) -> None:
        self._items: list[tuple[str, str]] = []
        if items is None:
            return
        if isinstance(items, Headers):
            self._items = list(items.items())
            return
        if isinstance(items, Mapping):
            for name, value in items.items():
                if isinstance(value, str):
                    self.add(name, value)
                else:
                    for item in value:
                        self.add(name, item)
            return
        for name, value in items:
            self.add(name, value)

    def add(self, name: str, value: str) -> None:
        # Append without touching existing values under the same name.
        self._items.append((_check_name(name), _check_value(value)))

    def set(self, name: str, value: str) -> None:
        # Replace all values under name with a single value.
        self.remove(name)
        self.add(name, value)

    def remove(self, name: str) -> None:
        key = name.lower()
        self._items = [(k, v) for k, v in self._items if k.lower() != key]

    def get(self, name: str, default: str | None = None) -> str | None:
        key = name.lower()
        for k, v in self._items:
            if k.lower() == key:
                return v
        return default

    def get_all(self, name: str) -> list[str]:
        key = name.lower()
        return [v for k, v in self._items if k.lower() == key]

    def names(self) -> list[str]:
        # Distinct names in first-seen order, original casing.
        seen: set[str] = set()
        result: list[str] = []
        for k, _ in self._items:
            if k.lower() not in seen:
                seen.add(k.lower())
                result.append(k)
        return result

    def items(self) -> list[tuple[str, str]]:
        return list(self._items)

    def copy(self) -> Headers:
        return Headers(self._items)

    def as_dict(self) -> dict[str, list[str]]:
        # Lower-cased name -> values, for comparisons and logging.
        result: dict[str, list[str]] = {}
        for k, v in self._items:
            result.setdefault(k.lower(), []).append(v)
        return result

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        key = name.lower()
        return any(k.lower() == key for k, _ in self._items)

    def __getitem__(self, name: str) -> str:
        value = self.get(name)
        if value is None:
            raise KeyError(name)
        return value

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Headers):
            return self.as_dict() == other.as_dict()
        return NotImplemented

    def __repr__(self) -> str:
        return f"Headers({self._items!r})"


def _check_name(name: str) -> str:
    if not isinstance(name, str) or not name or any(ch in name for ch in ":\r\n \t"):
        raise ValueError(f"Invalid header name: {name!r}")
    return name


def _check_value(value: str) -> str:
    # Header blocks are written as latin-1.
    if not isinstance(value, str) or "\r" in value or "\n" in value or not _is_latin1(value):
        raise ValueError(f"Invalid header value: {value!r}")
    return value


def _is_latin1(value: str) -> bool:
    try:
        value.encode("latin-1")
    except UnicodeEncodeError:
        return False
    return True
