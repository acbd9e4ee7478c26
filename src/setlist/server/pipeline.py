"""The host-independent request pipeline.

Both host adapters reduce their request to a ``RawRequest`` plus a body
reader and a ``ResponseSink``, then hand over to ``Pipeline.handle()``:

    normalize -> match -> dispatch -> realize -> session cookie -> sink

Requests rejected while decoding (400, 413) get a plain-text body and no
view; routing errors become empty error actions here; handler errors were
already converted by ``dispatch``.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from setlist.actions import RawAction, RedirectAction, ResponseAction, ViewAction
from setlist.config import AppConfig
from setlist.dispatch import dispatch, http_error_action
from setlist.errors import HTTPError, ResponseAlreadySentError
from setlist.http.headers import Headers
from setlist.http.request import Request
from setlist.http.response import Response
from setlist.routing.router import Router
from setlist.server.errors import error_response, plain_error
from setlist.server.sink import ResponseSink
from setlist.sessions import SessionStore
from setlist.templating.renderer import ViewRenderer

logger = logging.getLogger("setlist.server")

type BodyReader = Callable[[int], Awaitable[bytes]]


@dataclass(frozen=True, slots=True)
class RawRequest:
    """The host-independent parts of a request, before decoding.

    ``raw_path`` is still percent-encoded. The body is read separately
    through a ``BodyReader`` so the size limit applies while reading.
    """

    method: str
    raw_path: bytes
    query_string: bytes
    headers: Headers
    client: tuple[str, int] | None = None


class Pipeline:
    """Frozen per-app request processing shared by both host adapters."""

    __slots__ = ("_config", "_renderer", "_router", "_sessions")

    def __init__(
        self,
        *,
        router: Router,
        renderer: ViewRenderer | None,
        sessions: SessionStore | None,
        config: AppConfig,
    ) -> None:
        self._router = router
        self._renderer = renderer
        self._sessions = sessions
        self._config = config

    async def handle(self, raw: RawRequest, read_body: BodyReader, sink: ResponseSink) -> None:
        """Process one request and write exactly one response to *sink*."""
        try:
            body = await read_body(self._config.max_content_length)
            request = Request.from_parts(
                method=raw.method,
                raw_path=raw.raw_path,
                query_string=raw.query_string,
                headers=raw.headers,
                body=body,
                sessions=self._sessions,
                client=raw.client,
            )
        except HTTPError as exc:
            # Rejected before a Request exists: no controller, no session, no view
            logger.debug("%d %s %r: %s", exc.status, raw.method, raw.raw_path, exc.detail)
            response = plain_error(exc.status)
            if exc.headers:
                response = response.with_headers(exc.headers)
            await self._emit(sink, response, raw.method, raw.raw_path.decode("latin-1"))
            return

        try:
            match = self._router.match(request.method, request.path)
        except HTTPError as exc:
            logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
            action: ResponseAction = http_error_action(exc)
        else:
            action = await dispatch(match, request, timeout=self._config.handler_timeout)

        response = self.realize(action)
        if self._sessions is not None:
            response = response.with_set_cookie(self._sessions.save(request.session))
        await self._emit(sink, response, request.method, request.path)

    def realize(self, action: ResponseAction) -> Response:
        """Turn a response action into a concrete ``Response``."""
        match action:
            case ViewAction():
                return self._render_view(action)
            case RedirectAction(location=location, status=status):
                return Response(status=status, content_type="text/plain; charset=utf-8").with_header(
                    "Location", location
                )
            case RawAction(payload=payload, status=status, headers=headers) if (
                not payload and status >= 400
            ):
                return self._error(status, headers)
            case RawAction():
                return Response(
                    body=action.payload,
                    status=action.status,
                    content_type=action.content_type,
                    headers=action.headers,
                )

    def _render_view(self, action: ViewAction) -> Response:
        if self._renderer is None:
            logger.error("View %r returned but no template directory is configured", action.template)
            return self._error(500)
        try:
            context = self._renderer.context(action.context, layout=action.layout)
            body = self._renderer.render(action.template, context)
        except Exception:
            logger.exception("500 rendering %r", action.template)
            return self._error(500)
        return Response(body=body, status=action.status)

    def _error(self, status: int, headers: tuple[tuple[str, str], ...] = ()) -> Response:
        return error_response(
            status,
            renderer=self._renderer,
            template=self._config.error_template,
            headers=headers,
        )

    async def _emit(self, sink: ResponseSink, response: Response, method: str, path: str) -> None:
        try:
            await sink.send(response)
        except ResponseAlreadySentError:
            logger.exception("Dropped a second response for %s %s", method, path)
            return
        logger.info("%s %s %d", method, path, response.status)
