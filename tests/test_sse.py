"""Tests for wren.realtime — EventSource encoding and the SSE stream."""

import asyncio

from wren.http.response import SSEResponse
from wren.realtime.events import EventSource
from wren.realtime.sse import handle_sse
from wren.testing.sse import parse_sse_frames


class TestEncode:
    def test_data_only(self) -> None:
        source = EventSource(data=lambda: None)
        assert source.encode({"n": 1}) == 'data: {"n": 1}\n\n'

    def test_all_fields(self) -> None:
        source = EventSource(data=lambda: None, id=7, event="stats", retry=3000)
        assert source.encode([1]) == "id: 7\nevent: stats\nretry: 3000\ndata: [1]\n\n"

    def test_round_trips_through_parser(self) -> None:
        source = EventSource(data=lambda: None, id="a", event="tick")
        (message,) = parse_sse_frames(source.encode({"ok": True}))
        assert message.id == "a"
        assert message.event == "tick"
        assert message.json() == {"ok": True}


class TestParseFrames:
    def test_skips_comments_and_empty_blocks(self) -> None:
        raw = ": keepalive\n\ndata: 1\n\n\n\nevent: x\ndata: 2\nretry: 10\n\n"
        events = parse_sse_frames(raw)
        assert [(e.data, e.event, e.retry) for e in events] == [("1", None, None), ("2", "x", 10)]

    def test_multiline_data(self) -> None:
        (event,) = parse_sse_frames("data: a\ndata: b\n\n")
        assert event.data == "a\nb"


class TestHandleSSE:
    async def test_streams_until_disconnect(self) -> None:
        counter = iter(range(10))

        async def data() -> dict[str, int]:
            return {"n": next(counter)}

        sent: list[dict] = []
        disconnect = asyncio.Event()

        async def send(message: dict) -> None:
            sent.append(message)
            if len([m for m in sent if m.get("more_body")]) >= 2:
                disconnect.set()

        async def receive() -> dict:
            await disconnect.wait()
            return {"type": "http.disconnect"}

        response = SSEResponse(EventSource(data=data, interval=0.01), headers=(("X-Feed", "1"),))
        await asyncio.wait_for(handle_sse(response, send, receive), timeout=5)

        start = sent[0]
        assert start["status"] == 200
        assert (b"content-type", b"text/event-stream") in start["headers"]
        assert (b"cache-control", b"no-cache") in start["headers"]
        assert (b"x-feed", b"1") in start["headers"]

        chunks = [m["body"].decode() for m in sent if m.get("more_body")]
        assert chunks[:2] == ['data: {"n": 0}\n\n', 'data: {"n": 1}\n\n']
        assert sent[-1] == {"type": "http.response.body", "body": b"", "more_body": False}

    async def test_failing_source_closes_stream(self) -> None:
        def data() -> None:
            raise RuntimeError("source down")

        sent: list[dict] = []

        async def send(message: dict) -> None:
            sent.append(message)

        async def receive() -> dict:
            await asyncio.Event().wait()
            return {"type": "http.disconnect"}

        response = SSEResponse(EventSource(data=data, interval=0.01))
        await asyncio.wait_for(handle_sse(response, send, receive), timeout=5)

        assert [m["type"] for m in sent] == ["http.response.start", "http.response.body"]
        assert sent[-1]["more_body"] is False
