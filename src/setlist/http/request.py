"""Immutable normalized HTTP request.

Every host adapter (ASGI, WSGI) reduces its own request object to the
same handful of raw parts and calls ``Request.from_parts()``. Controllers
only ever see this type, never a host's scope or environ.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from setlist.http.cookies import parse_cookies
from setlist.http.forms import parse_content_type, parse_form_body
from setlist.http.headers import Headers
from setlist.http.query import QueryParams, QueryValue
from setlist.http.urlencoded import decode_path, decode_text
from setlist.sessions import Session, SessionStore

_EMPTY: Mapping[str, str] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class Request:
    """A normalized, immutable HTTP request.

    Fields are fixed at creation and hold decoded data:

    - ``path`` is percent-decoded.
    - ``params`` holds route parameters (filled in once a route matches).
    - ``query`` maps each key to a ``str``, or a tuple when it repeats.
    - ``body`` is the URL-encoded form as a flat dict (last value wins),
      or ``None`` for bodyless methods and non-form content types.
    - ``session`` is the one mutable piece: the session capability's
      per-request data, written back to the client after the handler runs.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    body: Mapping[str, str] | None
    cookies: Mapping[str, str]
    session: Session = field(default_factory=Session, compare=False)
    params: Mapping[str, str] = _EMPTY
    client: tuple[str, int] | None = None

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The media type of the body, without parameters."""
        value = self.headers.get("content-type")
        if value is None:
            return None
        return parse_content_type(value)[0]

    @property
    def url(self) -> str:
        """Path plus query string, as the client sent it."""
        raw = self.query.raw
        if raw:
            return f"{self.path}?{raw.decode('latin-1')}"
        return self.path

    def param(self, name: str) -> str:
        """Return route parameter *name* (``KeyError`` if absent)."""
        return self.params[name]

    def arg(self, name: str, default: QueryValue | None = None) -> QueryValue | None:
        """Return query parameter *name*, or *default*."""
        return self.query.get(name, default)

    def form(self, name: str, default: str = "") -> str:
        """Return form field *name* from the body, or *default*."""
        if self.body is None:
            return default
        return self.body.get(name, default)

    def with_params(self, params: Mapping[str, str]) -> Request:
        """Return a copy carrying the matched route's parameters."""
        return replace(self, params=MappingProxyType(dict(params)))

    # -- Factory --

    @classmethod
    def from_parts(
        cls,
        *,
        method: str,
        raw_path: bytes,
        query_string: bytes,
        headers: Headers,
        body: bytes,
        sessions: SessionStore | None = None,
        client: tuple[str, int] | None = None,
    ) -> Request:
        """Build a Request from host-independent raw parts.

        Deterministic: equal inputs produce equal requests. Raises
        ``MalformedRequestError`` when the path, query string or form body
        contains malformed percent-encoding or undecodable bytes.
        """
        method = method.upper()
        path = decode_path(decode_text(raw_path, what="path")) or "/"
        cookies = parse_cookies(headers.get_list("cookie"))
        form = parse_form_body(method, headers.get("content-type"), body)
        return cls(
            method=method,
            path=path,
            headers=headers,
            query=QueryParams(query_string),
            body=MappingProxyType(form) if form is not None else None,
            cookies=MappingProxyType(cookies),
            session=sessions.load(cookies) if sessions is not None else Session(),
            client=client,
        )
