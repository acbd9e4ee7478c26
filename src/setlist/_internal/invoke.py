"""Invoke helpers: call sync or async handlers uniformly.

Controllers can be ``def`` or ``async def``. Any code that calls a
user-provided callable must handle both cases, so the check lives here.

Usage::

    from setlist._internal.invoke import invoke

    result = await invoke(handler, request, helpers)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *handler* and await the result if it's awaitable.

    A sync handler runs to completion on the event loop; an async handler
    is awaited until it returns, so callers only ever see a finished value.
    """
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
