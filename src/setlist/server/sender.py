"""ASGI response sending: translates setlist Responses to ASGI messages."""

from setlist._internal.asgi import Send
from setlist.http.response import Response


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def encode_headers(response: Response) -> list[tuple[bytes, bytes]]:
    """Raw header pairs for *response*, including Set-Cookie and length."""
    raw_headers: list[tuple[bytes, bytes]] = [
        (b"content-type", response.content_type.encode("latin-1")),
    ]
    for name, value in response.headers:
        raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))
    raw_headers.extend(
        (b"set-cookie", cookie.to_header_value().encode("latin-1")) for cookie in response.cookies
    )
    raw_headers.append((b"content-length", str(len(response_body(response))).encode("latin-1")))
    return raw_headers


def response_body(response: Response) -> bytes:
    """The bytes to write for *response* (empty where the status forbids a body)."""
    return response.body_bytes if _body_allowed(response.status) else b""


async def send_response(response: Response, send: Send) -> None:
    """Translate a setlist Response into ASGI send() calls."""
    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": encode_headers(response),
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": response_body(response),
        }
    )
