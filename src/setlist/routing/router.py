"""Ordered route table with segment-by-segment matching.

Routes are registered during setup and frozen into a read-only table
when the app freezes. Matching walks the table in registration order,
so lookups are linear in routes x segments with no regex backtracking.
"""

from dataclasses import dataclass
from types import MappingProxyType
from urllib.parse import quote

from setlist.errors import ConfigurationError, DuplicateRouteError, MethodNotAllowed, NotFoundError
from setlist.routing.route import PathSegment, Route, RouteMatch


def parse_path(path: str) -> tuple[PathSegment, ...]:
    """Parse a route pattern into segments.

    Examples::

        "/"                 -> ()
        "/playlists"        -> (PathSegment("playlists"),)
        "/playlists/:id"    -> (PathSegment("playlists"), PathSegment(":id", True, "id"))

    Raises ``ConfigurationError`` for patterns that don't start with ``/``,
    empty or repeated parameter names, and ``{param}``-style segments.
    """
    if not path.startswith("/"):
        msg = f"Route pattern {path!r} must start with '/'."
        raise ConfigurationError(msg)

    segments: list[PathSegment] = []
    seen: set[str] = set()
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("{") and part.endswith("}"):
            msg = (
                f"Route pattern {path!r} uses {{param}} syntax. "
                f"Setlist expects :param segments, e.g. '/playlists/:id'."
            )
            raise ConfigurationError(msg)
        if part.startswith(":"):
            name = part[1:]
            if not name:
                msg = f"Route pattern {path!r} has an unnamed parameter segment."
                raise ConfigurationError(msg)
            if name in seen:
                msg = f"Route pattern {path!r} repeats parameter {name!r}."
                raise ConfigurationError(msg)
            seen.add(name)
            segments.append(PathSegment(value=part, is_param=True, param_name=name))
        else:
            segments.append(PathSegment(value=part))
    return tuple(segments)


def split_path(path: str) -> list[str]:
    """Split a request path into its non-empty segments."""
    return [part for part in path.strip("/").split("/") if part]


@dataclass(frozen=True, slots=True)
class _Entry:
    """A registered route with its parsed pattern."""

    route: Route
    segments: tuple[PathSegment, ...]
    # Literal text per position, None where the pattern has a parameter.
    # Two patterns with the same shape are the same pattern.
    shape: tuple[str | None, ...]
    literal_count: int

    def capture(self, parts: list[str]) -> dict[str, str] | None:
        """Compare segment-by-segment; return captured params or None."""
        params: dict[str, str] = {}
        for segment, part in zip(self.segments, parts, strict=True):
            if segment.is_param:
                params[segment.param_name or ""] = part
            elif segment.value != part:
                return None
        return params


class Router:
    """Ordered route table.

    Usage::

        router = Router()
        router.add(Route("/playlists", handler, frozenset({"GET"})))
        router.add(Route("/playlists/:id", handler, frozenset({"GET"})))
        router.compile()
        match = router.match("GET", "/playlists/42")
        match.params  # {"id": "42"}

    Precedence when several patterns match one path: the pattern with
    more literal segments wins, and registration order breaks any
    remaining tie (first registered wins).
    """

    __slots__ = ("_compiled", "_entries", "_names")

    def __init__(self) -> None:
        self._entries: list[_Entry] = []
        self._names: dict[str, _Entry] = {}
        self._compiled = False

    def add(self, route: Route) -> None:
        """Add a route. Must be called before compile().

        Raises ``DuplicateRouteError`` if any of the route's methods is
        already registered for the same pattern, whatever the handler.
        """
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        segments = parse_path(route.path)
        shape = tuple(None if seg.is_param else seg.value for seg in segments)

        for entry in self._entries:
            if entry.shape == shape:
                clash = entry.route.methods & route.methods
                if clash:
                    raise DuplicateRouteError(min(clash), route.path)

        entry = _Entry(
            route=route,
            segments=segments,
            shape=shape,
            literal_count=sum(1 for seg in segments if not seg.is_param),
        )

        if route.name is not None:
            if route.name in self._names:
                msg = f"Route name {route.name!r} is already registered."
                raise ConfigurationError(msg)
            self._names[route.name] = entry

        self._entries.append(entry)

    @property
    def routes(self) -> list[Route]:
        """Return all registered routes in registration order."""
        return [entry.route for entry in self._entries]

    def compile(self) -> None:
        """Freeze the table. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request method and path against the table.

        Returns a ``RouteMatch`` on success.
        Raises ``NotFoundError`` if no pattern matches the path.
        Raises ``MethodNotAllowed`` if a pattern matches but not for *method*.
        """
        parts = split_path(path)
        best: tuple[_Entry, dict[str, str]] | None = None
        allowed: set[str] = set()

        for entry in self._entries:
            if len(entry.segments) != len(parts):
                continue
            params = entry.capture(parts)
            if params is None:
                continue
            if method not in entry.route.methods:
                allowed.update(entry.route.methods)
                continue
            # Strictly greater: an equally specific later route never
            # displaces an earlier one.
            if best is None or entry.literal_count > best[0].literal_count:
                best = (entry, params)

        if best is not None:
            entry, params = best
            return RouteMatch(route=entry.route, params=MappingProxyType(params))

        if allowed:
            raise MethodNotAllowed(frozenset(allowed))

        raise NotFoundError(f"No route matches {method} {path!r}")

    def url_for(self, name: str, /, **params: object) -> str:
        """Build the path for a named route.

        Raises ``ConfigurationError`` for an unknown name or a missing
        parameter.
        """
        entry = self._names.get(name)
        if entry is None:
            msg = f"No route named {name!r}."
            raise ConfigurationError(msg)

        parts: list[str] = []
        for segment in entry.segments:
            if not segment.is_param:
                parts.append(segment.value)
                continue
            if segment.param_name not in params:
                msg = f"Route {name!r} needs parameter {segment.param_name!r}."
                raise ConfigurationError(msg)
            parts.append(quote(str(params[segment.param_name]), safe=""))
        return "/" + "/".join(parts)
