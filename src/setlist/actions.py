"""Response actions and the helpers that build them.

A controller is any callable with the signature
``(request, helpers) -> ResponseAction``. It describes *what* to emit;
the server pipeline decides *how* to write it to the host.

Three actions form a closed set:

- ``ViewAction`` renders a page template (wrapped in the layout).
- ``RedirectAction`` sends a ``Location`` with a 3xx status.
- ``RawAction`` sends a payload as-is with a declared content type.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from setlist.errors import ActionAlreadyProducedError

_EMPTY: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class ViewAction:
    """Render *template* with *context* as HTML.

    ``layout=False`` renders the page fragment alone, without the
    configured layout around it.
    """

    template: str
    context: Mapping[str, Any] = field(default=_EMPTY)
    status: int = 200
    layout: bool = True


@dataclass(frozen=True, slots=True)
class RedirectAction:
    """Redirect to *location*. The status must be a 3xx code."""

    location: str
    status: int = 302

    def __post_init__(self) -> None:
        if not 300 <= self.status < 400:
            msg = f"Redirect status must be 3xx, got {self.status}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class RawAction:
    """Send *payload* with *content_type* and no templating."""

    payload: str | bytes = ""
    content_type: str = "text/plain; charset=utf-8"
    status: int = 200
    headers: tuple[tuple[str, str], ...] = ()


type ResponseAction = ViewAction | RedirectAction | RawAction

ACTION_TYPES = (ViewAction, RedirectAction, RawAction)


class Helpers:
    """Per-request action builders handed to every controller.

    Each helper builds one action and marks the helpers as used. A second
    call fails, so a controller can never both redirect and render::

        def show(request, helpers):
            if not request.session.get("account_id"):
                return helpers.redirect("/login")
            return helpers.view("dashboard.html", {"playlists": []})
    """

    __slots__ = ("_produced",)

    def __init__(self) -> None:
        self._produced: str | None = None

    @property
    def produced(self) -> str | None:
        """Kind of the action already built (``"view"``, ...), or None."""
        return self._produced

    def _claim(self, kind: str) -> None:
        if self._produced is not None:
            raise ActionAlreadyProducedError(self._produced, kind)
        self._produced = kind

    def view(
        self,
        template: str,
        data: Mapping[str, Any] | None = None,
        status: int = 200,
        *,
        layout: bool = True,
    ) -> ViewAction:
        """Build a ``ViewAction`` for *template*."""
        self._claim("view")
        context = MappingProxyType(dict(data)) if data else _EMPTY
        return ViewAction(template=template, context=context, status=status, layout=layout)

    def redirect(self, location: str, status: int = 302) -> RedirectAction:
        """Build a ``RedirectAction``. ``ValueError`` unless *status* is 3xx."""
        self._claim("redirect")
        return RedirectAction(location=location, status=status)

    def raw(
        self,
        payload: str | bytes,
        content_type: str = "text/plain; charset=utf-8",
        status: int = 200,
    ) -> RawAction:
        """Build a ``RawAction``."""
        self._claim("raw")
        return RawAction(payload=payload, content_type=content_type, status=status)
