"""Cookie parsing and SetCookie serialization.

The read side (``parse_cookies``) feeds ``Request.cookies``; the write
side (``SetCookie``) is attached to a ``Response`` by the session layer.
"""

from collections.abc import Iterable
from dataclasses import dataclass


def parse_cookies(headers: Iterable[str]) -> dict[str, str]:
    """Parse one or more ``Cookie`` header values into a name-value dict.

    HTTP/2 clients may split cookies across several headers, so every
    value is read. Surrounding double quotes on a value are removed.
    A name that repeats keeps its first value (the most specific path).
    """
    cookies: dict[str, str] = {}
    for header in headers:
        for pair in header.split(";"):
            key, sep, value = pair.strip().partition("=")
            if not sep or not key:
                continue
            value = value.strip()
            if len(value) >= 2 and value[0] == value[-1] == '"':
                value = value[1:-1]
            cookies.setdefault(key.strip(), value)
    return cookies


@dataclass(frozen=True, slots=True)
class SetCookie:
    """A ``Set-Cookie`` directive attached to a Response."""

    name: str
    value: str
    max_age: int | None = None
    path: str = "/"
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"

    @classmethod
    def expired(cls, name: str, path: str = "/") -> SetCookie:
        """A directive that makes the browser drop cookie *name*."""
        return cls(name=name, value="", max_age=0, path=path)

    def to_header_value(self) -> str:
        """Serialize to a ``Set-Cookie`` header value string."""
        parts = [f"{self.name}={self.value}"]
        if self.max_age is not None:
            parts.append(f"Max-Age={self.max_age}")
        if self.path:
            parts.append(f"Path={self.path}")
        if self.secure:
            parts.append("Secure")
        if self.httponly:
            parts.append("HttpOnly")
        if self.samesite:
            parts.append(f"SameSite={self.samesite.capitalize()}")
        return "; ".join(parts)
