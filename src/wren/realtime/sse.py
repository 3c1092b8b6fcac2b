"""Server-Sent Events protocol implementation over ASGI.

Sends ``text/event-stream`` headers, then polls the EventSource on its
interval and writes one message per tick while monitoring for client
disconnect.
"""

import asyncio
import contextlib
import logging

from wren._internal.asgi import Receive, Send
from wren._internal.invoke import invoke
from wren.http.response import SSEResponse

logger = logging.getLogger("wren.server")

SSE_HEADERS: tuple[tuple[str, str], ...] = (
    ("content-type", "text/event-stream"),
    ("connection", "keep-alive"),
    ("cache-control", "no-cache"),
)

_FIXED = frozenset(name for name, _ in SSE_HEADERS)


async def handle_sse(response: SSEResponse, send: Send, receive: Receive) -> None:
    """Stream an EventSource over an ASGI connection.

    1. Sends ``http.response.start`` with the SSE headers plus any headers
       buffered on the Context.
    2. Runs a producer that sleeps ``interval`` seconds, awaits
       ``data()`` and sends the encoded message.
    3. Stops the producer as soon as ``http.disconnect`` arrives.
    """
    source = response.source
    headers = [(name.encode("latin-1"), value.encode("latin-1")) for name, value in SSE_HEADERS]
    for name, value in response.headers:
        if name.lower() not in _FIXED:
            headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))
    for cookie in response.cookies:
        headers.append((b"set-cookie", cookie.to_header_value().encode("latin-1")))

    await send({"type": "http.response.start", "status": 200, "headers": headers})

    disconnected = asyncio.Event()

    async def monitor_disconnect() -> None:
        """Wait for client disconnect."""
        while not disconnected.is_set():
            message = await receive()
            if message.get("type") == "http.disconnect":
                disconnected.set()
                return

    async def produce_events() -> None:
        while not disconnected.is_set():
            await asyncio.sleep(source.interval)
            try:
                payload = await invoke(source.data)
                message = source.encode(payload)
            except Exception:
                logger.exception("Event source failed; closing stream")
                return
            try:
                await send(
                    {
                        "type": "http.response.body",
                        "body": message.encode("utf-8"),
                        "more_body": True,
                    }
                )
            except RuntimeError:
                return  # Response already closed (client disconnected)

    producer_task = asyncio.create_task(produce_events())
    monitor_task = asyncio.create_task(monitor_disconnect())

    try:
        _done, pending = await asyncio.wait(
            {producer_task, monitor_task},
            return_when=asyncio.FIRST_COMPLETED,
        )
        for task in pending:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
    finally:
        with contextlib.suppress(Exception):
            await send({"type": "http.response.body", "body": b"", "more_body": False})
