"""Setlist application class.

Mutable during setup (route registration, partials, filters, hooks).
Frozen at runtime when app.run(), app.freeze() or __call__() is first
invoked.
"""

import inspect
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from kida import Environment

from setlist._internal.asgi import Environ, Receive, Scope, Send, StartResponse
from setlist.config import AppConfig
from setlist.errors import ConfigurationError
from setlist.routing.route import Route
from setlist.routing.router import Router
from setlist.server.asgi import handle_asgi
from setlist.server.pipeline import Pipeline
from setlist.server.wsgi import WSGIAdapter
from setlist.sessions import SessionStore
from setlist.templating.integration import bind_environment, create_environment
from setlist.templating.renderer import ViewRenderer

type Controller = Callable[..., Any]


@dataclass(slots=True)
class _PendingRoute:
    """A route waiting to be compiled."""

    path: str
    handler: Controller
    methods: list[str] | None
    name: str | None
    form_template: str | None = None


class App:
    """The setlist application.

    Mutable during setup (routes, partials, filters, hooks). Frozen at
    runtime when ``app.run()``, ``app.freeze()`` or ``__call__()`` is first
    invoked. Freezing builds the route table and compiles every template;
    a duplicate route or a missing template fails here, at startup.

    Thread safety:
        The setup phase is single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check so exactly one
        thread compiles the app, even when several worker threads receive
        their first request at once.
    """

    __slots__ = (
        "_custom_kida_env",
        "_freeze_lock",
        "_frozen",
        "_partials",
        "_pending_routes",
        # Compiled state (populated by freeze)
        "_pipeline",
        "_renderer",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "_template_filters",
        "_wsgi",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        kida_env: Environment | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._pending_routes: list[_PendingRoute] = []
        self._partials: dict[str, str] = dict(self.config.partials)
        self._template_filters: dict[str, Callable[..., Any]] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()
        self._custom_kida_env: Environment | None = kida_env

        # Compiled state: set during freeze()
        self._router: Router | None = None
        self._renderer: ViewRenderer | None = None
        self._pipeline: Pipeline | None = None
        self._wsgi: WSGIAdapter | None = None

    # -- Route registration --

    def route(
        self,
        path: str,
        *,
        methods: Iterable[str] | None = None,
        name: str | None = None,
        form_template: str | None = None,
    ) -> Callable[[Controller], Controller]:
        """Register a controller via decorator.

        Args:
            path: URL pattern. Use ``:name`` for path parameters.
            methods: HTTP methods. Defaults to ``["GET"]``.
            name: Optional route name for ``url_for``.
            form_template: Page re-rendered with status 422 when the
                controller raises ``ValidationError``.

        The controller is called as ``controller(request, helpers)`` and
        must return a response action.
        """

        def decorator(func: Controller) -> Controller:
            self.add_route(
                path, func, methods=methods, name=name, form_template=form_template
            )
            return func

        return decorator

    def get(self, path: str, **kwargs: Any) -> Callable[[Controller], Controller]:
        """Shorthand for ``route(path, methods=["GET"])``."""
        return self.route(path, methods=["GET"], **kwargs)

    def post(self, path: str, **kwargs: Any) -> Callable[[Controller], Controller]:
        """Shorthand for ``route(path, methods=["POST"])``."""
        return self.route(path, methods=["POST"], **kwargs)

    def add_route(
        self,
        path: str,
        handler: Controller,
        *,
        methods: Iterable[str] | None = None,
        name: str | None = None,
        form_template: str | None = None,
    ) -> None:
        """Register a controller without the decorator."""
        self._check_not_frozen()
        self._pending_routes.append(
            _PendingRoute(path, handler, list(methods) if methods else None, name, form_template)
        )

    # -- Template integration --

    def partial(self, name: str, template: str) -> None:
        """Register a partial rendered into every view under *name*."""
        self._check_not_frozen()
        self._partials[name] = template

    def template_filter(
        self,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a kida template filter."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            filter_name = name or func.__name__
            self._template_filters[filter_name] = func
            return func

        return decorator

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        before the server begins accepting HTTP requests.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Frozen state --

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def router(self) -> Router:
        self.freeze()
        assert self._router is not None
        return self._router

    @property
    def renderer(self) -> ViewRenderer:
        self.freeze()
        assert self._renderer is not None
        return self._renderer

    def url_for(self, name: str, /, **params: object) -> str:
        """Build the path of the route registered under *name*."""
        return self.router.url_for(name, **params)

    # -- Server --

    def run(
        self,
        host: str | None = None,
        port: int | None = None,
        *,
        server: str | None = None,
    ) -> None:
        """Freeze the app and serve it until interrupted.

        ``server`` is ``"asgi"`` (pounce) or ``"wsgi"`` (threaded
        ``wsgiref``); it defaults to ``config.server``.
        """
        self.freeze()

        _host = host or self.config.host
        _port = port or self.config.port
        _server = server or self.config.server

        if _server == "asgi":
            from setlist.server.runner import run_asgi_server

            run_asgi_server(self, _host, _port, reload=self.config.debug)
        elif _server == "wsgi":
            from setlist.server.runner import run_wsgi_server

            run_wsgi_server(self.wsgi, _host, _port)
        else:
            msg = f"Unknown server {_server!r}; expected 'asgi' or 'wsgi'."
            raise ConfigurationError(msg)

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles lifespan scopes directly, then delegates HTTP scopes to
        the request pipeline.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        if scope["type"] != "http":
            return

        self.freeze()
        assert self._pipeline is not None
        await handle_asgi(scope, receive, send, pipeline=self._pipeline)

    async def _handle_lifespan(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup (before first HTTP request), then
        runs registered startup/shutdown hooks and signals completion
        back to the server. A configuration error fails startup.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self.freeze()
                    for hook in self._startup_hooks:
                        result = hook()
                        if inspect.isawaitable(result):
                            await result
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    await send(
                        {
                            "type": "lifespan.startup.failed",
                            "message": str(exc),
                        }
                    )
                    return

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    result = hook()
                    if inspect.isawaitable(result):
                        await result
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- WSGI interface --

    @property
    def wsgi(self) -> WSGIAdapter:
        """The WSGI callable for this app (freezes on first access)."""
        self.freeze()
        assert self._wsgi is not None
        return self._wsgi

    def wsgi_app(self, environ: Environ, start_response: StartResponse) -> Any:
        """WSGI entry point, for servers that want a plain function."""
        return self.wsgi(environ, start_response)

    # -- Internal --

    def freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        Thread-safe with double-check locking; only the first call does
        any work. Raises ``ConfigurationError`` (``DuplicateRouteError``,
        ``TemplateNotFoundError``, ...) when the setup is invalid, in
        which case the app stays unfrozen.
        """
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """MUST only be called while holding _freeze_lock."""
        # 1. Compile route table
        router = Router()
        for pending in self._pending_routes:
            methods = frozenset(m.upper() for m in (pending.methods or ["GET"]))
            router.add(
                Route(
                    path=pending.path,
                    handler=pending.handler,
                    methods=methods,
                    name=pending.name,
                    form_template=pending.form_template,
                )
            )
        router.compile()

        # 2. Initialize kida environment
        globals_ = {"url_for": router.url_for}
        if self._custom_kida_env is not None:
            env = self._custom_kida_env
            bind_environment(env, self._template_filters, globals_)
        else:
            env = create_environment(self.config, self._template_filters, globals_)

        # 3. Compile every template once; a missing name fails startup
        renderer = ViewRenderer(env, layout=self.config.layout, partials=self._partials)
        renderer.freeze(
            required=[r.form_template for r in router.routes if r.form_template is not None]
        )

        # 4. Sessions are enabled by a secret key
        sessions = SessionStore(self.config) if self.config.secret_key else None

        pipeline = Pipeline(
            router=router, renderer=renderer, sessions=sessions, config=self.config
        )

        self._router = router
        self._renderer = renderer
        self._pipeline = pipeline
        self._wsgi = WSGIAdapter(pipeline)
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, partials, and filters before calling app.run()."
            )
            raise RuntimeError(msg)
