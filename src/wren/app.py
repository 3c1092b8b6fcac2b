"""Wren application class.

The App owns a Registry (its own, or one shared with other apps), the
template Engine and the compiled Router. Declarations accumulate on the
registry; ``compose()`` compiles them into the request pipeline, which
happens automatically on lifespan startup or on the first request.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from kida import Environment

from wren._internal.asgi import Receive, Scope, Send
from wren._internal.invoke import invoke
from wren.config import AppConfig
from wren.context import Context
from wren.errors import ConfigurationError
from wren.http.request import Request
from wren.http.response import Response, SSEResponse
from wren.markup import render_tree
from wren.registry import ErrorHandler, Handler, MiddlewareEntry, MiddlewareHandler, Registry
from wren.routing.route import Method, RouteEntry
from wren.routing.router import Router
from wren.server.handler import Pipeline, dispatch, handle_request
from wren.server.static import StaticFiles
from wren.templating.engine import Engine

logger = logging.getLogger("wren.server")
routing_logger = logging.getLogger("wren.routing")

RESERVED_NAMES = frozenset(name for name in dir(Context) if not name.startswith("__"))
"""Context attributes a plugin name may not shadow."""


class App:
    """The wren application.

    Usage::

        app = App(AppConfig(port=8080))

        @app.get("/hello/:name")
        def hello(ctx):
            return f"Hello, {ctx.params['name']}!"

        app.serve("/public")
        app.run()

    Thread safety:
        Declarations happen at import time. The first compose uses a
        Lock + double-check so that concurrent first requests compile the
        pipeline exactly once.
    """

    __slots__ = (
        "_compose_lock",
        "_engine",
        "_pipeline",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
        "registry",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        registry: Registry | None = None,
        kida_env: Environment | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self.registry: Registry = registry if registry is not None else Registry()
        self._engine = Engine(
            self.config.template_dir,
            autoescape=self.config.autoescape,
            env=kida_env,
        )
        self._router = Router(strict=self.config.strict_routes)
        self._pipeline: Pipeline | None = None
        self._compose_lock = threading.Lock()
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []

    # -- Route registration --

    def route(
        self,
        path: str,
        *,
        method: Method | str = Method.GET,
        template: str | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            path: URL pattern. Use ``:name`` for parameters and a trailing
                ``*name`` to capture the rest of the path.
            method: HTTP method, or ``Method.ALL`` to answer any method
                that has no route of its own.
            template: Template the handler's return value is rendered with.
        """
        return self.registry.route(path, method=method, template=template)

    def all(self, path: str, *, template: str | None = None) -> Callable[[Handler], Handler]:
        return self.registry.all(path, template=template)

    def get(self, path: str, *, template: str | None = None) -> Callable[[Handler], Handler]:
        return self.registry.get(path, template=template)

    def post(self, path: str, *, template: str | None = None) -> Callable[[Handler], Handler]:
        return self.registry.post(path, template=template)

    def put(self, path: str, *, template: str | None = None) -> Callable[[Handler], Handler]:
        return self.registry.put(path, template=template)

    def delete(self, path: str, *, template: str | None = None) -> Callable[[Handler], Handler]:
        return self.registry.delete(path, template=template)

    def patch(self, path: str, *, template: str | None = None) -> Callable[[Handler], Handler]:
        return self.registry.patch(path, template=template)

    def head(self, path: str, *, template: str | None = None) -> Callable[[Handler], Handler]:
        return self.registry.head(path, template=template)

    def options(self, path: str, *, template: str | None = None) -> Callable[[Handler], Handler]:
        return self.registry.options(path, template=template)

    def controller[C: type](self, prefix: str = "") -> Callable[[C], C]:
        """Register a class of marked methods. See ``Registry.controller``."""
        return self.registry.controller(prefix)

    def serve(self, prefix: str = "/", directory: str | None = None) -> App:
        """Serve static files under *prefix*.

        Registers ``GET prefix`` and ``GET prefix/*path``. The request path
        is resolved under *directory* (default: the working directory).
        """
        static = StaticFiles(directory, index=self.config.static_index)
        base = prefix.rstrip("/")
        self.registry.register_route(RouteEntry(Method.GET, base or "/", static))
        self.registry.register_route(RouteEntry(Method.GET, f"{base}/*path", static))
        return self

    # -- Middleware, plugins, errors --

    def middleware(self, priority: int = 0) -> Callable[[MiddlewareHandler], MiddlewareHandler]:
        """Register a middleware via decorator. Lower priority runs first."""
        return self.registry.middleware(priority)

    def use(self, handler: MiddlewareHandler, priority: int = 0) -> App:
        """Register a middleware directly."""
        self.registry.register_middleware(MiddlewareEntry(priority, handler))
        return self

    def plugin[T](self, name: str) -> Callable[[T], T]:
        """Expose a singleton as ``ctx.<name>``. See ``Registry.plugin``."""
        return self.registry.plugin(name)

    def error_handler(self, func: ErrorHandler) -> ErrorHandler:
        """Register the error handler via decorator.

        It receives the Context with ``ctx.error`` and ``ctx.status`` set,
        and its return value becomes the response body.
        """
        return self.registry.error_handler(func)

    # -- Template integration --

    def engine(
        self,
        *,
        template_dir: str | None = None,
        autoescape: bool | None = None,
        env: Environment | None = None,
    ) -> App:
        """Reconfigure the template engine."""
        self._engine.configure(template_dir=template_dir, autoescape=autoescape, env=env)
        return self

    def template_filter(
        self,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a kida template filter."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._engine.add_filter(name or func.__name__, func)
            return func

        return decorator

    def template_global(
        self,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a kida template global."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._engine.add_global(name or func.__name__, func)
            return func

        return decorator

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        after the pipeline is composed.
        """
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator."""
        self._shutdown_hooks.append(func)
        return func

    # -- Composition --

    def compose(self) -> Router:
        """Compile the registry into the router and request pipeline.

        Safe to call repeatedly: re-adding an unchanged route is a no-op,
        so composing unchanged declarations leaves routing as it was.

        Raises:
            ConfigurationError: For malformed route patterns, plugin names
                that shadow Context attributes, or (with
                ``strict_routes``) conflicting routes.
        """
        plugins = self.registry.plugins()
        for name in plugins:
            if name in RESERVED_NAMES or name.startswith("_"):
                msg = f"Plugin name {name!r} shadows a Context attribute"
                raise ConfigurationError(msg)

        for entry in self.registry.compose():
            self._router.add(entry)

        self._pipeline = Pipeline(
            router=self._router,
            middleware=self.registry.middleware_chain(),
            error_handler=self.registry.registered_error_handler,
            plugins=plugins,
            view=self._engine.view,
            render=self._engine.render,
            render_tree=render_tree,
        )
        routing_logger.debug(
            "Composed %d routes, %d middleware, %d plugins",
            len(self._router.routes),
            len(self._pipeline.middleware),
            len(plugins),
        )
        return self._router

    def _ensure_composed(self) -> Pipeline:
        """Compose once, with double-check locking."""
        pipeline = self._pipeline
        if pipeline is not None:
            return pipeline
        with self._compose_lock:
            if self._pipeline is None:
                self.compose()
            assert self._pipeline is not None
            return self._pipeline

    @property
    def routes(self) -> list[RouteEntry]:
        """Every route the router answers, composing first if needed."""
        self._ensure_composed()
        return self._router.routes

    # -- Dispatch --

    async def dispatch(self, request: Request) -> Response | SSEResponse:
        """Run *request* through the pipeline and return the full response.

        Listener-agnostic: any server that can build a ``Request`` can
        serve the app through this method.
        """
        return await dispatch(request, self._ensure_composed())

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Compose the app and serve it with pounce.

        Logs an error and returns without serving when no route has been
        declared, typically because the declaring modules were not imported.
        """
        self.compose()
        if not self._router.routes:
            logger.error(
                "No route found. Make sure the modules declaring routes are imported."
            )
            return

        from wren.server.serve import run_server

        _host = host or self.config.host
        _port = port or self.config.port
        logger.info("Server is running at http://%s:%d", _host, _port)
        run_server(
            self,
            _host,
            _port,
            workers=self.config.workers,
            reload=self.config.debug,
            log_level=self.config.log_level,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles lifespan scopes directly, then delegates HTTP scopes to
        the request pipeline.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        await handle_request(scope, receive, send, self._ensure_composed())

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Composes at startup (before the first HTTP request), then runs
        registered startup/shutdown hooks and signals completion back to
        the server.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_composed()
                    for hook in self._startup_hooks:
                        await invoke(hook)
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send(
                        {
                            "type": "lifespan.startup.failed",
                            "message": str(exc),
                        }
                    )
                    return

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    await invoke(hook)
                await send({"type": "lifespan.shutdown.complete"})
                return
