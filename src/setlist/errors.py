"""Setlist exception hierarchy.

Shared across the router, normalizer, dispatcher, renderer and server
adapters so every module raises and catches the same types.

Three families:

- **Startup errors** (``ConfigurationError`` and subclasses) are raised
  while the app freezes. The process refuses to start.
- **HTTP errors** (``HTTPError`` and subclasses) map directly to a status
  code and are turned into a ``RawAction`` before any body is written.
- **Handler errors** (``ValidationError``, ``ConflictError``) are raised by
  controllers and the store, and converted to actions by the dispatcher.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


class SetlistError(Exception):
    """Base for all setlist-specific errors."""


class ConfigurationError(SetlistError):
    """Raised when app configuration is invalid.

    Typically raised during ``App.freeze()`` at startup.
    """


class DuplicateRouteError(ConfigurationError):
    """Two routes were registered for the same method and pattern."""

    def __init__(self, method: str, pattern: str) -> None:
        self.method = method
        self.pattern = pattern
        super().__init__(f"Route {method} {pattern!r} is already registered.")


class TemplateNotFoundError(ConfigurationError):
    """A page template, layout or partial is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Template {name!r} is not registered.")


@dataclass(frozen=True, slots=True)
class HTTPError(SetlistError):
    """An error that maps directly to an HTTP status code.

    Raised by the normalizer, the router, or handlers. The pipeline
    converts it to a ``RawAction`` carrying the same status.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class MalformedRequestError(HTTPError):
    """400: the request line, query string or body cannot be decoded."""

    def __init__(self, detail: str = "Malformed request") -> None:
        super().__init__(status=400, detail=detail)


class NotFoundError(HTTPError):
    """404: no route matched the path, or a looked-up entity is missing."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: the path matches a route but not for this HTTP method."""

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        super().__init__(
            status=405,
            detail=detail or f"Method not allowed. Allowed methods: {allow_value}",
            headers=(("Allow", allow_value),),
        )


class PayloadTooLarge(HTTPError):  # noqa: N818
    """413: the request body exceeds ``AppConfig.max_content_length``."""

    def __init__(self, limit: int) -> None:
        super().__init__(status=413, detail=f"Request body exceeds {limit} bytes")


class ConflictError(SetlistError):
    """A store write collides with existing data (e.g. a taken username)."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class ValidationError(SetlistError):
    """Form input was rejected; re-render the route's form template.

    Attributes:
        errors: Field name -> list of error messages.
        form: The submitted values, echoed back into the form.
        context: Extra template data the form page needs to render.
    """

    def __init__(
        self,
        errors: Mapping[str, list[str]],
        form: Mapping[str, str] | None = None,
        **context: Any,
    ) -> None:
        self.errors = dict(errors)
        self.form = dict(form or {})
        self.context = context
        fields = ", ".join(sorted(self.errors))
        super().__init__(f"Validation failed for: {fields}")


class ResponseAlreadySentError(SetlistError):
    """A response sink was written to more than once."""


class ActionAlreadyProducedError(SetlistError):
    """A handler asked its helpers for a second response action."""

    def __init__(self, first: str, second: str) -> None:
        super().__init__(
            f"Handler already produced a {first!r} action; refusing a second {second!r} action."
        )


class ClientDisconnected(SetlistError):  # noqa: N818
    """The client went away before the request body was complete."""
