"""Immutable, case-insensitive HTTP headers.

Implements ``Mapping[str, str]``. Built from either host shape: ASGI's
raw byte pairs or WSGI's ``HTTP_*`` environ keys. Names are stored
lower-cased so both hosts produce equal ``Headers``.
"""

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

# CGI-style environ keys that carry headers without the HTTP_ prefix
_WSGI_UNPREFIXED = {"CONTENT_TYPE": "content-type", "CONTENT_LENGTH": "content-length"}


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive HTTP headers.

    ``__getitem__`` returns the first matching value.
    ``get_list`` returns all values for a header (e.g. multiple ``Cookie``).
    """

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[tuple[str, str]] = ()) -> None:
        object.__setattr__(
            self, "_items", tuple((name.lower(), value) for name, value in items)
        )

    @classmethod
    def from_asgi(cls, raw: Iterable[tuple[bytes, bytes]]) -> Headers:
        """Decode ASGI ``(name, value)`` byte pairs (latin-1, per RFC 9110)."""
        return cls((name.decode("latin-1"), value.decode("latin-1")) for name, value in raw)

    @classmethod
    def from_environ(cls, environ: Mapping[str, Any]) -> Headers:
        """Collect headers from a WSGI environ.

        ``HTTP_X_FORWARDED_FOR`` becomes ``x-forwarded-for``;
        ``CONTENT_TYPE`` and ``CONTENT_LENGTH`` are included when non-empty.
        """
        items: list[tuple[str, str]] = []
        for key, value in environ.items():
            if key.startswith("HTTP_"):
                items.append((key[5:].replace("_", "-"), str(value)))
            elif key in _WSGI_UNPREFIXED and value not in ("", None):
                items.append((_WSGI_UNPREFIXED[key], str(value)))
        return cls(items)

    def __getitem__(self, key: str) -> str:
        key_lower = key.lower()
        for name, value in self._items:
            if name == key_lower:
                return value
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        key_lower = key.lower()
        return any(name == key_lower for name, _ in self._items)

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._items:
            if name not in seen:
                seen.add(name)
                yield name

    def __len__(self) -> int:
        return len(set(self))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Headers):
            return NotImplemented
        return sorted(self._items) == sorted(other._items)

    def __hash__(self) -> int:
        return hash(tuple(sorted(self._items)))

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"Headers({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        try:
            return self[key]
        except KeyError:
            return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        key_lower = key.lower()
        return [value for name, value in self._items if name == key_lower]
