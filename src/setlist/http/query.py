"""Immutable query string parameters.

A key seen once maps to a plain ``str``; a key seen two or more times
maps to a tuple of its values in first-to-last order::

    ?tag=x          -> {"tag": "x"}
    ?tag=x&tag=y    -> {"tag": ("x", "y")}
"""

from collections.abc import Iterator, Mapping

from setlist.http.urlencoded import decode_text, parse_pairs

type QueryValue = str | tuple[str, ...]


class QueryParams(Mapping[str, QueryValue]):
    """Immutable query string parameters.

    Attributes:
        _data: Field name -> every value, in order of appearance.
        _raw: Raw query string bytes.
    """

    _data: dict[str, list[str]]
    _raw: bytes

    __slots__ = ("_data", "_raw")

    def __init__(self, query_string: bytes = b"") -> None:
        text = decode_text(query_string, what="query string")
        data: dict[str, list[str]] = {}
        for name, value in parse_pairs(text, what="query string"):
            data.setdefault(name, []).append(value)
        object.__setattr__(self, "_raw", query_string)
        object.__setattr__(self, "_data", data)

    def __getitem__(self, key: str) -> QueryValue:
        values = self._data[key]
        if len(values) == 1:
            return values[0]
        return tuple(values)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"QueryParams({{{items}}})"

    @property
    def raw(self) -> bytes:
        """The query string exactly as received."""
        return self._raw

    def first(self, key: str, default: str | None = None) -> str | None:
        """Return the first value for *key*, or *default* if missing."""
        values = self._data.get(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*, always as a list."""
        return list(self._data.get(key, []))
