"""View rendering: page template + shared partials + layout.

The renderer compiles every template once, at startup, into a dict that
is never written again. Rendering a view is then three steps:

1. Each registered partial is rendered with the view data and injected
   as safe markup under its own name.
2. The page template is rendered with data + partials.
3. When a layout is set, it is rendered with data + partials and the
   page fragment under the reserved ``body`` key.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from kida import Environment, Markup, Template, TemplateError
from kida import TemplateNotFoundError as KidaTemplateNotFoundError

from setlist.errors import ConfigurationError, TemplateNotFoundError

logger = logging.getLogger("setlist.templating")

# Layout variable holding the rendered page fragment
BODY_KEY = "body"

_EMPTY: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class ViewContext:
    """Everything one render needs. Built fresh for every request."""

    data: Mapping[str, Any] = field(default=_EMPTY)
    layout: str | None = None
    partials: Mapping[str, str] = field(default=_EMPTY)


class ViewRenderer:
    """Renders page templates inside a layout, with named partials.

    Usage::

        renderer = ViewRenderer(env, layout="layout.html",
                                partials={"nav": "partials/nav.html"})
        renderer.freeze()
        html = renderer.render("dashboard.html", renderer.context({"name": "ada"}))

    ``defaults`` are merged under every view's data; per-request data wins.
    """

    __slots__ = ("_defaults", "_env", "_frozen", "_layout", "_partials", "_templates")

    def __init__(
        self,
        env: Environment,
        *,
        layout: str | None = None,
        partials: Mapping[str, str] | None = None,
        defaults: Mapping[str, Any] | None = None,
    ) -> None:
        partials = dict(partials or {})
        if BODY_KEY in partials:
            msg = f"Partial name {BODY_KEY!r} is reserved for the page fragment."
            raise ConfigurationError(msg)
        self._env = env
        self._layout = layout
        self._partials: Mapping[str, str] = MappingProxyType(partials)
        self._defaults: Mapping[str, Any] = MappingProxyType(dict(defaults or {}))
        self._templates: Mapping[str, Template] = _EMPTY
        self._frozen = False

    @property
    def layout(self) -> str | None:
        return self._layout

    @property
    def partials(self) -> Mapping[str, str]:
        return self._partials

    @property
    def template_names(self) -> frozenset[str]:
        """Names of every compiled template."""
        return frozenset(self._templates)

    # -- Startup --

    def freeze(self, required: Iterable[str] = ()) -> None:
        """Compile every template the loader knows, plus *required* names.

        The layout and every partial are always required. Raises
        ``TemplateNotFoundError`` for a name the loader cannot resolve and
        ``ConfigurationError`` for a template that fails to compile.
        """
        if self._frozen:
            return

        names: list[str] = []
        loader = self._env.loader
        if loader is not None and hasattr(loader, "list_templates"):
            names.extend(loader.list_templates())
        if self._layout is not None:
            names.append(self._layout)
        names.extend(self._partials.values())
        names.extend(required)

        templates: dict[str, Template] = {}
        for name in names:
            if name not in templates:
                templates[name] = self._compile(name)

        self._templates = MappingProxyType(templates)
        self._frozen = True
        logger.debug("Compiled %d templates", len(templates))

    def _compile(self, name: str) -> Template:
        try:
            return self._env.get_template(name)
        except KidaTemplateNotFoundError as exc:
            raise TemplateNotFoundError(name) from exc
        except TemplateError as exc:
            msg = f"Template {name!r} failed to compile: {exc}"
            raise ConfigurationError(msg) from exc

    def has_template(self, name: str) -> bool:
        return name in self._templates

    # -- Rendering --

    def context(self, data: Mapping[str, Any] | None = None, *, layout: bool = True) -> ViewContext:
        """Build a ViewContext from startup configuration plus *data*."""
        merged = {**self._defaults, **(data or {})}
        return ViewContext(
            data=merged,
            layout=self._layout if layout else None,
            partials=self._partials,
        )

    def render(self, template: str, context: ViewContext) -> str:
        """Render *template*, wrapped in ``context.layout`` when set.

        Raises ``TemplateNotFoundError`` for a name that was not compiled
        at startup.
        """
        page = self._get(template)
        data = dict(context.data)
        data.pop(BODY_KEY, None)

        for name, partial in context.partials.items():
            data[name] = Markup(self._get(partial).render(data))

        fragment = page.render(data)
        if context.layout is None:
            return fragment

        data[BODY_KEY] = Markup(fragment)
        return self._get(context.layout).render(data)

    def _get(self, name: str) -> Template:
        template = self._templates.get(name)
        if template is None:
            raise TemplateNotFoundError(name)
        return template
