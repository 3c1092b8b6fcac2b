"""Content negotiation — maps return values to Response objects.

``negotiate`` inspects the value a handler (or the error handler)
produced and returns the matching Response. isinstance-based dispatch,
no magic, fully predictable.
"""

import json as json_module
from typing import Any

from wren.http.response import Redirect, Response, SSEResponse
from wren.markup import Element, render_tree
from wren.realtime.events import EventSource

DOCTYPE = "<!DOCTYPE html>"


def negotiate(value: Any) -> Response | SSEResponse:
    """Convert a return value to a Response.

    Dispatch order:

    1. ``Response``         -> pass through
    2. ``Redirect``         -> status with Location header
    3. ``Element``          -> ``<!DOCTYPE html>`` + rendered tree, text/html
    4. ``EventSource``      -> SSEResponse (handler streams it directly)
    5. ``None``             -> empty body
    6. ``str``              -> text/html
    7. ``bytes``            -> application/octet-stream
    8. ``dict`` / ``list``  -> application/json

    Raises:
        TypeError: For any other type.
    """
    match value:
        case Response():
            return value
        case Redirect():
            return (
                Response(body="")
                .with_status(value.status)
                .with_header("Location", value.url)
                .with_headers(dict(value.headers))
            )
        case Element():
            return Response(body=DOCTYPE + render_tree(value))
        case EventSource():
            return SSEResponse(source=value)
        case None:
            return Response(body="")
        case str():
            return Response(body=value, content_type="text/html; charset=utf-8")
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case dict() | list():
            return Response(
                body=json_module.dumps(value, default=str),
                content_type="application/json",
            )
        case _:
            msg = (
                f"Cannot convert {type(value).__name__} to a response. "
                "Return a str, bytes, dict, list, None, Response, Redirect, "
                "Template, Element or EventSource."
            )
            raise TypeError(msg)
