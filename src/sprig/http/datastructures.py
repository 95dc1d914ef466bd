"""Read-only multi-valued mappings: Headers, QueryParams, FormData.

All three share one storage model: keys map to a list of values in
arrival order. ``m[key]`` returns the first value, ``m.get_list(key)``
returns all of them. Headers fold key case; the others do not.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import TypeAlias
from urllib.parse import parse_qsl

Pairs: TypeAlias = Iterable[tuple[str, str]] | Mapping[str, str]


class MultiValueDict(Mapping[str, str]):
    """Base read-only mapping where a key can carry several values."""

    __slots__ = ("_data",)

    _fold_case = False

    def __init__(self, pairs: Pairs = ()) -> None:
        items = pairs.items() if isinstance(pairs, Mapping) else pairs
        data: dict[str, list[str]] = {}
        for key, value in items:
            data.setdefault(self._key(str(key)), []).append(str(value))
        object.__setattr__(self, "_data", data)

    def __setattr__(self, name: str, value: object) -> None:
        msg = f"{type(self).__name__} is read-only"
        raise AttributeError(msg)

    def _key(self, key: str) -> str:
        return key.lower() if self._fold_case else key

    def __getitem__(self, key: str) -> str:
        return self._data[self._key(key)][0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._key(key) in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"{type(self).__name__}({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        values = self._data.get(self._key(key))
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(self._key(key), []))

    def get_int(self, key: str, default: int | None = None) -> int | None:
        """Return value as int, or *default* if missing or not numeric."""
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default

    def get_bool(self, key: str, default: bool | None = None) -> bool | None:
        """Return value as bool (``true``/``1``/``yes``/``on`` -> True)."""
        value = self.get(key)
        if value is None:
            return default
        return value.lower() in ("true", "1", "yes", "on")

    def to_dict(self) -> dict[str, str]:
        """Flatten to a plain dict keeping the first value per key."""
        return {key: values[0] for key, values in self._data.items()}


class Headers(MultiValueDict):
    """Case-insensitive HTTP headers. Keys are stored lower-cased."""

    __slots__ = ()

    _fold_case = True

    @classmethod
    def from_environ(cls, environ: Mapping[str, object]) -> Headers:
        """Collect headers from a WSGI environ (``HTTP_*`` plus content keys)."""
        pairs: list[tuple[str, str]] = []
        for key, value in environ.items():
            if key.startswith("HTTP_"):
                name = key[5:]
            elif key in ("CONTENT_TYPE", "CONTENT_LENGTH"):
                name = key
            else:
                continue
            if value == "":
                continue
            pairs.append((name.replace("_", "-"), str(value)))
        return cls(pairs)


class QueryParams(MultiValueDict):
    """Parsed query string. Keeps the raw string for URL rebuilding."""

    __slots__ = ("_raw",)

    def __init__(self, query_string: str = "") -> None:
        super().__init__(parse_qsl(query_string, keep_blank_values=True))
        object.__setattr__(self, "_raw", query_string)

    @property
    def raw(self) -> str:
        """The undecoded query string."""
        return self._raw


class FormData(MultiValueDict):
    """Fields from an ``application/x-www-form-urlencoded`` body."""

    __slots__ = ()

    @classmethod
    def parse(cls, body: bytes | str) -> FormData:
        text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
        return cls(parse_qsl(text, keep_blank_values=True))
