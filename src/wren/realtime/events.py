"""EventSource: a polled Server-Sent Events stream.

Returned from a handler, it keeps the connection open and pushes the
JSON-encoded result of ``data()`` every ``interval`` seconds until the
client disconnects.
"""

import json as json_module
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class EventSource:
    """A polled SSE stream.

    Usage::

        @app.get("/feed")
        def feed(ctx):
            return EventSource(data=monitor.snapshot, event="stats", interval=2.0)

    ``data`` may be sync or async. Every message carries the optional
    ``id``, ``event`` and ``retry`` fields followed by ``data: <json>``.
    """

    data: Callable[[], Any | Awaitable[Any]]
    id: str | int | None = None
    event: str | None = None
    retry: int | None = None
    interval: float = 1.0

    def encode(self, payload: Any) -> str:
        """Serialize one message to SSE wire format."""
        lines: list[str] = []
        if self.id not in (None, ""):
            lines.append(f"id: {self.id}")
        if self.event:
            lines.append(f"event: {self.event}")
        if self.retry:
            lines.append(f"retry: {self.retry}")
        lines.append(f"data: {json_module.dumps(payload, default=str)}")
        return "\n".join(lines) + "\n\n"
