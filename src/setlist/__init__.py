"""Setlist: a small multi-user playlist web app and the framework under it.

The framework maps an HTTP request to a controller, hands it a
normalized ``Request`` and returns one response action, rendered from a
layout, a page template and shared partials. It serves the same app
over ASGI (pounce) or WSGI (wsgiref).

Basic usage::

    from setlist import App, AppConfig

    app = App(AppConfig(template_dir="templates", layout="layout.html"))

    @app.get("/")
    def index(request, helpers):
        return helpers.view("index.html", {"title": "Home"})

    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "Helpers",
    "HTTPError",
    "MethodNotAllowed",
    "NotFoundError",
    "RawAction",
    "RedirectAction",
    "Request",
    "Response",
    "SetlistError",
    "ValidationError",
    "ViewAction",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import setlist`` fast while providing a clean top-level API.
    """
    if name == "App":
        from setlist.app import App

        return App

    if name == "AppConfig":
        from setlist.config import AppConfig

        return AppConfig

    if name == "Request":
        from setlist.http.request import Request

        return Request

    if name == "Response":
        from setlist.http.response import Response

        return Response

    if name in ("Helpers", "RawAction", "RedirectAction", "ViewAction"):
        from setlist import actions as _actions

        return getattr(_actions, name)

    if name in (
        "ConfigurationError",
        "HTTPError",
        "MethodNotAllowed",
        "NotFoundError",
        "SetlistError",
        "ValidationError",
    ):
        from setlist import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
