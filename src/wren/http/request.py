"""Immutable HTTP request.

Frozen metadata with async body access. The request is honest about
what it is: received data that doesn't change.
"""

from __future__ import annotations

import json as json_module
from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field
from typing import Any

from wren._internal.asgi import Receive
from wren.http.cookies import parse_cookies
from wren.http.headers import Headers
from wren.http.query import QueryParams


async def _empty_body() -> dict[str, Any]:
    return {"type": "http.request", "body": b"", "more_body": False}


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers, etc.) is frozen at creation.
    Body is accessed asynchronously via ``.body()``, ``.json()``,
    ``.text()`` and ``.form()``.

    Cookies are parsed once at creation time and stored as a frozen
    field, not re-parsed on every access.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    http_version: str
    server: tuple[str, int] | None
    client: tuple[str, int] | None
    cookies: Mapping[str, str]

    # Private: ASGI-style receive callable for body streaming
    _receive: Receive = field(default=_empty_body, repr=False, compare=False)

    # Private: mutable cache for the body and parsed form data
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def remote_addr(self) -> str | None:
        """The client host, if the listener reported one."""
        if self.client is None:
            return None
        return self.client[0]

    @property
    def url(self) -> str:
        """Request path plus query string."""
        qs = self.query.raw
        if qs:
            return f"{self.path}?{qs.decode('latin-1')}"
        return self.path

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached: the receive callable is consumed once, then
        the same bytes are returned on subsequent calls.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def json(self) -> Any:
        """Parse the body as JSON."""
        raw = await self.body()
        return json_module.loads(raw)

    async def text(self) -> str:
        """Read the body as text (UTF-8)."""
        raw = await self.body()
        return raw.decode("utf-8")

    async def form(self) -> QueryParams:
        """Parse an ``application/x-www-form-urlencoded`` body.

        Raises:
            ValueError: If the Content-Type is not URL-encoded form data.
        """
        if "_form" in self._cache:
            return self._cache["_form"]
        ct = self.content_type or "application/x-www-form-urlencoded"
        if not ct.startswith("application/x-www-form-urlencoded"):
            msg = f"Unsupported form content type: {ct!r}"
            raise ValueError(msg)
        result = QueryParams(await self.body())
        self._cache["_form"] = result
        return result

    # -- Factories --

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        headers = Headers(tuple(scope.get("headers", ())))
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            headers=headers,
            query=QueryParams(scope.get("query_string", b"")),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            cookies=parse_cookies(headers.get("cookie", "")),
            _receive=receive,
        )

    @classmethod
    def build(
        cls,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        query_string: str = "",
        body: bytes = b"",
        remote_addr: str | None = None,
    ) -> Request:
        """Create a Request directly, for listeners that are not ASGI."""
        sent = False

        async def receive() -> dict[str, Any]:
            nonlocal sent
            if sent:
                return {"type": "http.disconnect"}
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}

        hdrs = Headers.from_mapping(headers or {})
        return cls(
            method=method.upper(),
            path=path,
            headers=hdrs,
            query=QueryParams(query_string.encode("latin-1")),
            http_version="1.1",
            server=None,
            client=(remote_addr, 0) if remote_addr else None,
            cookies=parse_cookies(hdrs.get("cookie", "")),
            _receive=receive,
        )
