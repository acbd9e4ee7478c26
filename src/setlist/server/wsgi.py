"""WSGI host adapter.

Reduces a WSGI environ to the same ``RawRequest`` the ASGI adapter
builds, runs the async pipeline to completion in a fresh event loop
(``anyio.run``), and hands the single recorded response back through
``start_response``.
"""

from collections.abc import Iterable
from urllib.parse import quote

import anyio

from setlist._internal.asgi import Environ, StartResponse
from setlist.http.headers import Headers
from setlist.http.response import Response
from setlist.server.asgi import PATH_SAFE, declared_length
from setlist.server.errors import plain_error, reason_phrase
from setlist.server.pipeline import Pipeline, RawRequest
from setlist.server.sender import encode_headers, response_body
from setlist.server.sink import ResponseSink


def _raw_path(environ: Environ) -> bytes:
    # Prefer the undecoded request URI some servers expose, so
    # percent-encoding is decoded exactly once, by the normalizer.
    uri = environ.get("RAW_URI") or environ.get("REQUEST_URI")
    if uri and uri.startswith("/"):
        path = uri.partition("?")[0]
        script_name = quote(environ.get("SCRIPT_NAME", "").encode("latin-1"), safe=PATH_SAFE)
        if script_name and path.startswith(script_name):
            path = path[len(script_name) :]
        return (path or "/").encode("latin-1")
    # PEP 3333: PATH_INFO is already decoded, carried as latin-1 text
    path_info = environ.get("PATH_INFO", "") or "/"
    return quote(path_info.encode("latin-1"), safe=PATH_SAFE).encode("ascii")


def raw_request_from_environ(environ: Environ) -> RawRequest:
    """Extract the host-independent request parts from a WSGI environ."""
    addr = environ.get("REMOTE_ADDR")
    port = environ.get("REMOTE_PORT")
    client = (addr, int(port)) if addr and port and str(port).isdigit() else None
    return RawRequest(
        method=environ.get("REQUEST_METHOD", "GET"),
        raw_path=_raw_path(environ),
        query_string=environ.get("QUERY_STRING", "").encode("latin-1"),
        headers=Headers.from_environ(environ),
        client=client,
    )


def read_wsgi_body(environ: Environ, headers: Headers, limit: int) -> bytes:
    """Read exactly ``Content-Length`` bytes from ``wsgi.input``.

    Without a ``Content-Length`` the body is empty (PEP 3333).
    """
    length = declared_length(headers, limit)
    if not length:
        return b""
    return environ["wsgi.input"].read(length)


def wsgi_status(status: int) -> str:
    """``404`` -> ``"404 Not Found"``."""
    return f"{status} {reason_phrase(status)}"


class WSGIAdapter:
    """A WSGI callable serving a frozen pipeline.

    Each request runs in its own event loop, so a handler timeout cancels
    only that request's work.
    """

    __slots__ = ("_pipeline",)

    def __init__(self, pipeline: Pipeline) -> None:
        self._pipeline = pipeline

    def __call__(self, environ: Environ, start_response: StartResponse) -> Iterable[bytes]:
        raw = raw_request_from_environ(environ)

        async def read_body(limit: int) -> bytes:
            return read_wsgi_body(environ, raw.headers, limit)

        async def record(response: Response) -> None:
            """The sink keeps the response; WSGI writes it after the loop ends."""

        sink = ResponseSink(record)
        anyio.run(self._pipeline.handle, raw, read_body, sink)

        response = sink.response if sink.response is not None else plain_error(500)
        headers = [
            (name.decode("latin-1"), value.decode("latin-1"))
            for name, value in encode_headers(response)
        ]
        start_response(wsgi_status(response.status), headers)
        return [response_body(response)]
