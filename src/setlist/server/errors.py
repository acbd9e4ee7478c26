"""Error pages for empty error actions.

An empty ``RawAction`` with a 4xx/5xx status becomes a full error page:
the registered error template when there is one, otherwise a plain-text
body. Neither ever includes exception details or stack traces.
"""

import logging
from http import HTTPStatus

from setlist.http.response import Response
from setlist.templating.renderer import ViewRenderer

logger = logging.getLogger("setlist.server")


def reason_phrase(status: int) -> str:
    """``404`` -> ``"Not Found"``; unknown codes get ``"Error"``."""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Error"


def plain_error(status: int) -> Response:
    """Plain-text error body, e.g. ``404 Not Found``."""
    return Response(
        body=f"{status} {reason_phrase(status)}",
        status=status,
        content_type="text/plain; charset=utf-8",
    )


def error_response(
    status: int,
    *,
    renderer: ViewRenderer | None,
    template: str | None,
    headers: tuple[tuple[str, str], ...] = (),
) -> Response:
    """Build the error page for *status*.

    The template receives ``status`` and ``reason`` and is wrapped in the
    layout. If the error page itself fails to render, the failure is
    logged and the plain-text body is used instead.
    """
    response = None
    if renderer is not None and template is not None and renderer.has_template(template):
        data = {"status": status, "reason": reason_phrase(status)}
        try:
            body = renderer.render(template, renderer.context(data))
        except Exception:
            logger.exception("Error template %r failed for status %d", template, status)
        else:
            response = Response(body=body, status=status)
    if response is None:
        response = plain_error(status)
    return response.with_headers(headers) if headers else response
