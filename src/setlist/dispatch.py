"""Controller dispatch.

Runs the matched controller with ``(request, helpers)`` and always comes
back with exactly one response action. Handler failures are converted
here; transport and routing failures are converted by the pipeline.
"""

import logging
from types import MappingProxyType

import anyio

from setlist._internal.invoke import invoke
from setlist.actions import ACTION_TYPES, Helpers, RawAction, ResponseAction, ViewAction
from setlist.errors import HTTPError, ValidationError
from setlist.http.request import Request
from setlist.routing.route import Route, RouteMatch

logger = logging.getLogger("setlist.dispatch")


def http_error_action(exc: HTTPError) -> RawAction:
    """An empty ``RawAction`` carrying the error's status and headers.

    The empty payload tells the pipeline to render its error page.
    """
    return RawAction(status=exc.status, headers=exc.headers)


async def dispatch(
    match: RouteMatch,
    request: Request,
    *,
    timeout: float | None = None,
) -> ResponseAction:
    """Invoke the matched controller and return its response action.

    - a returned action is passed through unchanged
    - ``HTTPError`` (e.g. ``NotFoundError`` from the store) -> empty
      ``RawAction`` with that status
    - ``ValidationError`` -> 422 ``ViewAction`` of the route's form template
    - exceeding *timeout* seconds -> 503; the handler is cancelled
    - anything else -> 500, logged with its traceback
    """
    request = request.with_params(match.params)
    try:
        # The cancel scope belongs to this call only; a late handler is
        # cancelled here and never sees another request's sink.
        with anyio.fail_after(timeout):
            return await _call(match.route, request)
    except TimeoutError:
        logger.warning(
            "503 %s %s: handler exceeded %ss", request.method, request.path, timeout
        )
        return RawAction(status=503)


async def _call(route: Route, request: Request) -> ResponseAction:
    helpers = Helpers()
    try:
        result = await invoke(route.handler, request, helpers)
    except HTTPError as exc:
        logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
        return http_error_action(exc)
    except ValidationError as exc:
        if route.form_template is None:
            logger.error(
                "500 %s %s: ValidationError from a route without a form template",
                request.method,
                request.path,
                exc_info=exc,
            )
            return RawAction(status=500)
        context = {**exc.context, "errors": exc.errors, "form": exc.form}
        return ViewAction(
            template=route.form_template,
            context=MappingProxyType(context),
            status=422,
        )
    except Exception:
        logger.exception("500 %s %s", request.method, request.path)
        return RawAction(status=500)

    if not isinstance(result, ACTION_TYPES):
        logger.error(
            "500 %s %s: handler returned %s instead of a response action",
            request.method,
            request.path,
            type(result).__name__,
        )
        return RawAction(status=500)
    return result
