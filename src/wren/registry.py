"""Metadata registry: declarations collected before the app composes.

Modules declare routes, middleware, plugins and an error handler against a
``Registry``, either with explicit ``register_*`` calls or with the
decorator layer on top of them::

    registry = Registry()

    @registry.get("/users/:id")
    async def show(ctx):
        return {"id": ctx.params["id"]}

    @registry.middleware(priority=10)
    def log_request(ctx):
        ...

Classes can group declarations. Methods marked with the module-level
markers are registered, in declaration order, when the class is
decorated with ``Registry.controller``::

    from wren import registry as r

    @registry.controller("/users")
    class Users:
        @r.get("/:id")
        def show(self, ctx): ...

        @r.middleware(priority=1)
        def auth(self, ctx): ...

The registry never validates. Malformed patterns surface when the router
compiles them.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from wren.routing.route import Method, RouteEntry

logger = logging.getLogger("wren.registry")

type Handler = Callable[..., Any]
type ErrorHandler = Callable[..., Any]
type MiddlewareHandler = Callable[..., None | Awaitable[None]]

_MARKERS = "__wren_markers__"


@dataclass(frozen=True, slots=True)
class MiddlewareEntry:
    """A middleware declaration. Lower priority runs first."""

    priority: int
    handler: MiddlewareHandler


@dataclass(frozen=True, slots=True)
class PluginBinding:
    """A named singleton exposed as ``ctx.<name>`` on every Context."""

    name: str
    instance: object


@dataclass(frozen=True, slots=True)
class _RouteMarker:
    method: Method
    path: str
    template: str | None


@dataclass(frozen=True, slots=True)
class _MiddlewareMarker:
    priority: int


@dataclass(frozen=True, slots=True)
class _ErrorHandlerMarker:
    pass


def _mark[F: Callable[..., Any]](func: F, marker: object) -> F:
    markers = func.__dict__.setdefault(_MARKERS, [])
    markers.append(marker)
    return func


def _join(prefix: str, path: str) -> str:
    if not prefix:
        return path
    return prefix.rstrip("/") + path


class Registry:
    """Accumulates declarations until the app composes them.

    One registry may be shared by several apps.
    """

    __slots__ = ("_error_handler", "_middleware", "_plugins", "_routes")

    def __init__(self) -> None:
        self._routes: list[RouteEntry] = []
        self._middleware: list[MiddlewareEntry] = []
        self._plugins: dict[str, object] = {}
        self._error_handler: ErrorHandler | None = None

    # -- Registration --

    def register_route(self, entry: RouteEntry) -> None:
        self._routes.append(entry)

    def register_middleware(self, entry: MiddlewareEntry) -> None:
        self._middleware.append(entry)

    def register_plugin(self, binding: PluginBinding) -> None:
        if binding.name in self._plugins and self._plugins[binding.name] is not binding.instance:
            logger.warning("Plugin %r registered twice; the later instance replaces it", binding.name)
        self._plugins[binding.name] = binding.instance

    def register_error_handler(self, handler: ErrorHandler) -> None:
        if self._error_handler is not None and self._error_handler != handler:
            logger.debug("Error handler %r replaced by %r", self._error_handler, handler)
        self._error_handler = handler

    # -- Reading --

    def compose(self) -> list[RouteEntry]:
        """Return every declared route in declaration order."""
        return list(self._routes)

    def middleware_chain(self) -> tuple[MiddlewareEntry, ...]:
        """Return middleware sorted by ascending priority.

        The sort is stable: equal priorities keep declaration order.
        """
        return tuple(sorted(self._middleware, key=lambda entry: entry.priority))

    def plugins(self) -> dict[str, object]:
        """Return a copy of the plugin name -> instance table."""
        return dict(self._plugins)

    @property
    def registered_error_handler(self) -> ErrorHandler | None:
        return self._error_handler

    # -- Decorator layer --

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
            method: HTTP method, or ``Method.ALL`` for any method.
            template: Template the return value is rendered through.
        """

        def decorator(func: Handler) -> Handler:
            self.register_route(RouteEntry(Method(str(method).upper()), path, func, template))
            return func

        return decorator

    def all(self, path: str, *, template: str | None = None) -> Callable[[Handler], Handler]:
        return self.route(path, method=Method.ALL, template=template)

    def get(self, path: str, *, template: str | None = None) -> Callable[[Handler], Handler]:
        return self.route(path, method=Method.GET, template=template)

    def post(self, path: str, *, template: str | None = None) -> Callable[[Handler], Handler]:
        return self.route(path, method=Method.POST, template=template)

    def put(self, path: str, *, template: str | None = None) -> Callable[[Handler], Handler]:
        return self.route(path, method=Method.PUT, template=template)

    def delete(self, path: str, *, template: str | None = None) -> Callable[[Handler], Handler]:
        return self.route(path, method=Method.DELETE, template=template)

    def patch(self, path: str, *, template: str | None = None) -> Callable[[Handler], Handler]:
        return self.route(path, method=Method.PATCH, template=template)

    def head(self, path: str, *, template: str | None = None) -> Callable[[Handler], Handler]:
        return self.route(path, method=Method.HEAD, template=template)

    def options(self, path: str, *, template: str | None = None) -> Callable[[Handler], Handler]:
        return self.route(path, method=Method.OPTIONS, template=template)

    def middleware(
        self, priority: int = 0
    ) -> Callable[[MiddlewareHandler], MiddlewareHandler]:
        """Register a middleware via decorator."""

        def decorator(func: MiddlewareHandler) -> MiddlewareHandler:
            self.register_middleware(MiddlewareEntry(priority, func))
            return func

        return decorator

    def error_handler(self, func: ErrorHandler) -> ErrorHandler:
        """Register *func* as the error handler. Usable as a bare decorator."""
        self.register_error_handler(func)
        return func

    def plugin[T](self, name: str) -> Callable[[T], T]:
        """Bind a plugin via decorator.

        Decorating a class binds a single instance created with no
        arguments; decorating anything else binds the object itself.
        """

        def decorator(obj: T) -> T:
            instance = obj() if isinstance(obj, type) else obj
            self.register_plugin(PluginBinding(name, instance))
            return obj

        return decorator

    def controller[C: type](self, prefix: str = "") -> Callable[[C], C]:
        """Instantiate a class once and register its marked methods.

        Methods are visited in class declaration order, so middleware with
        equal priority keeps that order. ``prefix`` is prepended to every
        route path.
        """

        def decorator(cls: C) -> C:
            instance = cls()
            for attr, value in vars(cls).items():
                markers = getattr(value, _MARKERS, None)
                if not markers:
                    continue
                bound = getattr(instance, attr)
                for marker in markers:
                    match marker:
                        case _RouteMarker(method=method, path=path, template=template):
                            self.register_route(
                                RouteEntry(method, _join(prefix, path), bound, template)
                            )
                        case _MiddlewareMarker(priority=priority):
                            self.register_middleware(MiddlewareEntry(priority, bound))
                        case _ErrorHandlerMarker():
                            self.register_error_handler(bound)
            return cls

        return decorator


# -- Module-level markers, consumed by Registry.controller --


def route(
    path: str, *, method: Method | str = Method.GET, template: str | None = None
) -> Callable[[Handler], Handler]:
    """Mark a method as a route handler."""
    marker = _RouteMarker(Method(str(method).upper()), path, template)
    return lambda func: _mark(func, marker)


def all(path: str, *, template: str | None = None) -> Callable[[Handler], Handler]:  # noqa: A001
    return route(path, method=Method.ALL, template=template)


def get(path: str, *, template: str | None = None) -> Callable[[Handler], Handler]:
    return route(path, method=Method.GET, template=template)


def post(path: str, *, template: str | None = None) -> Callable[[Handler], Handler]:
    return route(path, method=Method.POST, template=template)


def put(path: str, *, template: str | None = None) -> Callable[[Handler], Handler]:
    return route(path, method=Method.PUT, template=template)


def delete(path: str, *, template: str | None = None) -> Callable[[Handler], Handler]:
    return route(path, method=Method.DELETE, template=template)


def patch(path: str, *, template: str | None = None) -> Callable[[Handler], Handler]:
    return route(path, method=Method.PATCH, template=template)


def head(path: str, *, template: str | None = None) -> Callable[[Handler], Handler]:
    return route(path, method=Method.HEAD, template=template)


def options(path: str, *, template: str | None = None) -> Callable[[Handler], Handler]:
    return route(path, method=Method.OPTIONS, template=template)


def middleware(priority: int = 0) -> Callable[[MiddlewareHandler], MiddlewareHandler]:
    """Mark a method as middleware."""
    marker = _MiddlewareMarker(priority)
    return lambda func: _mark(func, marker)


def error_handler(func: ErrorHandler) -> ErrorHandler:
    """Mark a method as the error handler."""
    return _mark(func, _ErrorHandlerMarker())
