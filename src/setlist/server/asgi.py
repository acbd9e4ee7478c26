"""ASGI host adapter.

The only component that touches raw ASGI directly. Reduces a scope and
its ``receive`` channel to a ``RawRequest`` and a body reader, and
writes the pipeline's single response through ``send``.
"""

import logging
from functools import partial
from urllib.parse import quote

from setlist._internal.asgi import Receive, Scope, Send
from setlist.errors import ClientDisconnected, MalformedRequestError, PayloadTooLarge
from setlist.http.headers import Headers
from setlist.server.pipeline import Pipeline, RawRequest
from setlist.server.sender import send_response
from setlist.server.sink import ResponseSink

# Characters that stay literal when re-quoting an already-decoded path
PATH_SAFE = "/:@!$&'()*+,;=-._~"

logger = logging.getLogger("setlist.server")


def declared_length(headers: Headers, limit: int) -> int | None:
    """Validate ``Content-Length`` against *limit* before reading."""
    value = headers.get("content-length")
    if value is None:
        return None
    if not value.strip().isdigit():
        msg = f"Invalid Content-Length: {value!r}"
        raise MalformedRequestError(msg)
    length = int(value)
    if length > limit:
        raise PayloadTooLarge(limit)
    return length


def raw_request_from_scope(scope: Scope) -> RawRequest:
    """Extract the host-independent request parts from an ASGI scope.

    Uses ``raw_path`` when the server provides it so percent-encoding is
    decoded exactly once, by the normalizer.
    """
    raw_path = scope.get("raw_path")
    if not raw_path:
        raw_path = quote(scope.get("path", "/"), safe=PATH_SAFE).encode("ascii")
    client = scope.get("client")
    return RawRequest(
        method=scope.get("method", "GET"),
        raw_path=bytes(raw_path),
        query_string=scope.get("query_string", b""),
        headers=Headers.from_asgi(scope.get("headers", [])),
        client=tuple(client) if client else None,
    )


async def read_asgi_body(receive: Receive, headers: Headers, limit: int) -> bytes:
    """Read the full body from ``receive``, enforcing *limit* while reading.

    Raises ``ClientDisconnected`` if the client leaves mid-body; a
    truncated body is never handed to a controller.
    """
    declared_length(headers, limit)
    chunks: list[bytes] = []
    size = 0
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            msg = f"Client disconnected after {size} body bytes"
            raise ClientDisconnected(msg)
        chunk = message.get("body", b"")
        if chunk:
            size += len(chunk)
            if size > limit:
                raise PayloadTooLarge(limit)
            chunks.append(chunk)
        if not message.get("more_body", False):
            break
    return b"".join(chunks)


async def handle_asgi(scope: Scope, receive: Receive, send: Send, *, pipeline: Pipeline) -> None:
    """Process a single ASGI HTTP request through the pipeline."""
    raw = raw_request_from_scope(scope)

    async def read_body(limit: int) -> bytes:
        return await read_asgi_body(receive, raw.headers, limit)

    sink = ResponseSink(partial(send_response, send=send))
    try:
        await pipeline.handle(raw, read_body, sink)
    except ClientDisconnected as exc:
        # Nobody is listening; abandon the request without a response
        logger.debug("%s %r abandoned: %s", raw.method, raw.raw_path, exc)
