"""Tests for wren.server.sender — Response to ASGI messages."""

import pytest

from wren.http.response import Response
from wren.server.sender import body_allowed, encode_headers, send_response


class _Collector:
    def __init__(self) -> None:
        self.messages: list[dict] = []

    async def __call__(self, message: dict) -> None:
        self.messages.append(message)


class TestBodyAllowed:
    @pytest.mark.parametrize("status", [100, 101, 204, 304])
    def test_bodiless(self, status: int) -> None:
        assert not body_allowed(status)

    @pytest.mark.parametrize("status", [200, 201, 301, 404, 500])
    def test_with_body(self, status: int) -> None:
        assert body_allowed(status)


class TestEncodeHeaders:
    def test_content_type_first_and_names_lowered(self) -> None:
        response = Response("x").with_header("X-Trace", "1")
        assert encode_headers(response) == [
            (b"content-type", b"text/html; charset=utf-8"),
            (b"x-trace", b"1"),
        ]

    def test_no_content_type_without_body(self) -> None:
        response = Response(status=304).with_header("Last-Modified", "now")
        assert encode_headers(response) == [(b"last-modified", b"now")]

    def test_cookies(self) -> None:
        response = Response().with_cookie("a", "1")
        assert (b"set-cookie", b"a=1; Path=/; HttpOnly; SameSite=lax") in encode_headers(response)


class TestSendResponse:
    async def test_start_and_body(self) -> None:
        send = _Collector()
        await send_response(Response("hello", status=201), send)

        start, body = send.messages
        assert start["type"] == "http.response.start"
        assert start["status"] == 201
        assert (b"content-length", b"5") in start["headers"]
        assert body == {"type": "http.response.body", "body": b"hello"}

    async def test_bodiless_status(self) -> None:
        send = _Collector()
        await send_response(Response("dropped", status=204), send)

        start, body = send.messages
        assert all(name != b"content-length" for name, _ in start["headers"])
        assert body["body"] == b""
