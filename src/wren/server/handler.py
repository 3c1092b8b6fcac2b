"""Request dispatch — the per-request pipeline.

``dispatch`` takes a Request through match, middleware, handler,
post-processing and error capture, and returns the finished Response.
``handle_request`` is the ASGI side: it builds the Request from the
scope and sends whatever ``dispatch`` produced.
"""

import time
from collections.abc import Callable, Mapping
from contextvars import Token
from dataclasses import dataclass, replace
from typing import Any

from wren._internal.asgi import Receive, Scope, Send
from wren._internal.invoke import invoke
from wren.context import Context, context_var
from wren.http.request import Request
from wren.http.response import Redirect, Response, SSEResponse
from wren.markup import Element
from wren.middleware.pipeline import run_middleware
from wren.registry import MiddlewareEntry
from wren.routing.router import Router
from wren.server.errors import handle_failure
from wren.server.negotiation import DOCTYPE
from wren.server.sender import send_response
from wren.templating.returns import Template


@dataclass(frozen=True, slots=True)
class Pipeline:
    """Everything a request needs, compiled once when the app composes."""

    router: Router
    middleware: tuple[MiddlewareEntry, ...]
    error_handler: Callable[..., Any] | None
    plugins: Mapping[str, object]
    view: Callable[..., Any]
    render: Callable[..., Any]
    render_tree: Callable[[Any], str]


async def dispatch(request: Request, pipeline: Pipeline) -> Response | SSEResponse:
    """Process a single request through the full pipeline."""
    start = time.perf_counter()
    ctx = Context(
        request,
        view=pipeline.view,
        render=pipeline.render,
        render_tree=pipeline.render_tree,
        plugins=pipeline.plugins,
    )
    token: Token[Context] = context_var.set(ctx)
    try:
        try:
            response = await _handle(ctx, pipeline)
        except Exception as exc:
            response = await handle_failure(exc, ctx, pipeline.error_handler)
    finally:
        context_var.reset(token)

    elapsed = int((time.perf_counter() - start) * 1000)
    return replace(response, headers=(*response.headers, ("x-response-time", f"{elapsed}ms")))


async def _handle(ctx: Context, pipeline: Pipeline) -> Response | SSEResponse:
    """Match, run middleware and the handler, then post-process its value."""
    found = pipeline.router.match(ctx.method, ctx.path)
    ctx.params = found.params

    await run_middleware(pipeline.middleware, ctx)

    value = await invoke(found.route.handler, ctx)

    if found.route.template is not None and not isinstance(value, Response | Redirect):
        value = await invoke(ctx.view, found.route.template, value)
    else:
        match value:
            case Template(name=name, context=context):
                value = await invoke(ctx.view, name, context)
            case Element():
                value = DOCTYPE + ctx.render_tree(value)

    return ctx.build(value)


async def handle_request(scope: Scope, receive: Receive, send: Send, pipeline: Pipeline) -> None:
    """Translate one ASGI HTTP connection into a dispatch and send the result."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    response = await dispatch(request, pipeline)

    if isinstance(response, SSEResponse):
        from wren.realtime.sse import handle_sse

        await handle_sse(response, send, receive)
    else:
        await send_response(response, send)
