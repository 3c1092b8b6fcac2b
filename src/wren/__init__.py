"""Wren — declarative HTTP dispatch.

Routes, middleware, plugins and an error handler are declared against a
registry, compiled once into a segment-trie router, and every request
runs through the same pipeline: match, middleware, handler, render,
respond.

Basic usage::

    from wren import App

    app = App()

    @app.get("/hello/:name")
    def hello(ctx):
        return f"Hello, {ctx.params['name']}!"

    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "Context",
    "Element",
    "EventSource",
    "HTTPError",
    "Method",
    "Middleware",
    "NotFound",
    "Redirect",
    "Registry",
    "Request",
    "Response",
    "RouteConflict",
    "Template",
    "TemplateNotFound",
    "WrenError",
    "get_context",
    "h",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "App":
        from wren.app import App

        return App

    if name == "AppConfig":
        from wren.config import AppConfig

        return AppConfig

    if name == "Registry":
        from wren.registry import Registry

        return Registry

    if name == "Method":
        from wren.routing.route import Method

        return Method

    if name == "Request":
        from wren.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from wren.http import response as _resp

        return getattr(_resp, name)

    if name in ("Context", "get_context"):
        from wren import context as _ctx

        return getattr(_ctx, name)

    if name == "Template":
        from wren.templating.returns import Template

        return Template

    if name in ("Element", "h"):
        from wren import markup as _markup

        return getattr(_markup, name)

    if name == "EventSource":
        from wren.realtime.events import EventSource

        return EventSource

    if name == "Middleware":
        from wren.middleware.protocol import Middleware

        return Middleware

    if name in (
        "ConfigurationError",
        "HTTPError",
        "NotFound",
        "RouteConflict",
        "TemplateNotFound",
        "WrenError",
    ):
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
