"""Single-use response sink.

Each request gets exactly one sink. The pipeline writes one ``Response``
to it; the host adapter decides how those bytes reach the transport.
"""

from collections.abc import Awaitable, Callable

from setlist.errors import ResponseAlreadySentError
from setlist.http.response import Response

type Writer = Callable[[Response], Awaitable[None]]


class ResponseSink:
    """Writes one response through *writer*, then refuses any further send.

    Usage::

        sink = ResponseSink(writer)
        await sink.send(Response("hello"))
        await sink.send(Response("again"))  # ResponseAlreadySentError
    """

    __slots__ = ("_response", "_writer")

    def __init__(self, writer: Writer) -> None:
        self._writer = writer
        self._response: Response | None = None

    @property
    def sent(self) -> bool:
        return self._response is not None

    @property
    def response(self) -> Response | None:
        """The response that was sent, if any."""
        return self._response

    async def send(self, response: Response) -> None:
        if self._response is not None:
            msg = (
                f"Response already sent with status {self._response.status}; "
                f"refusing a second response with status {response.status}"
            )
            raise ResponseAlreadySentError(msg)
        self._response = response
        await self._writer(response)
