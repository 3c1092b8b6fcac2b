"""Error handling pipeline for wren requests.

Every failure from routing, middleware, the handler or rendering ends up
here exactly once. It is logged, recorded on the Context, and turned into
a response by the registered error handler or a plain-text default.
"""

import logging
from collections.abc import Callable
from typing import Any

from wren._internal.invoke import invoke
from wren.context import Context
from wren.errors import HTTPError, message_of, status_of
from wren.http.response import Response, SSEResponse

logger = logging.getLogger("wren.server")

PLAIN_TEXT = "text/plain; charset=utf-8"


def last_resort() -> Response:
    """The response used when the error handler itself fails."""
    return Response(body="Internal Server Error", status=500, content_type=PLAIN_TEXT)


async def handle_failure(
    exc: Exception,
    ctx: Context,
    error_handler: Callable[..., Any] | None,
) -> Response | SSEResponse:
    """Map a failure to a Response.

    ``ctx.error`` and ``ctx.status`` are populated before the error handler
    runs. Its return value is built like a handler's, at the failure's
    status unless it returns a ``Response`` of its own. Without an error
    handler the failure's message is sent as plain text.
    """
    status = status_of(exc)
    if isinstance(exc, HTTPError):
        logger.warning("%d %s %s: %s", status, ctx.method, ctx.path, message_of(exc))
    else:
        logger.error("%d %s %s", status, ctx.method, ctx.path, exc_info=exc)

    ctx.reset()
    ctx.error = exc
    ctx.status = status
    ctx.status_text = ""
    if isinstance(exc, HTTPError):
        for name, value in exc.headers:
            ctx.set(name, value)

    try:
        if error_handler is None:
            ctx.set("Content-Type", PLAIN_TEXT)
            return ctx.build(message_of(exc))
        body = await invoke(error_handler, ctx)
        return ctx.build(body)
    except Exception:
        logger.exception("Error handler failed for %s %s", ctx.method, ctx.path)
        return last_resort()
