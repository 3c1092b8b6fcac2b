"""HTTP response with chainable .with_*() transformation API.

Each transformation returns a new Response; nothing is mutated in place.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from http import HTTPStatus
from typing import Any

from wren.http.cookies import SetCookie


def reason_phrase(status: int) -> str:
    """Return the standard reason phrase for *status*, or ``""``."""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations.

    Construct with a body, then chain ``.with_*()`` calls to set
    status, headers, and cookies. Each call returns a new ``Response``.

    ``reason`` is the status text; empty means the standard phrase.
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/html; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()
    cookies: tuple[SetCookie, ...] = ()
    reason: str = ""

    # -- Chainable transformations --

    def with_status(self, status: int, reason: str = "") -> Response:
        """Return a new Response with a different status code."""
        return replace(self, status=status, reason=reason)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        """Return a new Response with additional headers."""
        new = tuple(headers.items())
        return replace(self, headers=(*self.headers, *new))

    def with_content_type(self, content_type: str) -> Response:
        """Return a new Response with a different content type."""
        return replace(self, content_type=content_type)

    def with_cookie(
        self,
        name: str,
        value: str,
        *,
        max_age: int | None = None,
        expires: float | None = None,
        path: str = "/",
        domain: str | None = None,
        secure: bool = False,
        httponly: bool = True,
        samesite: str = "lax",
    ) -> Response:
        """Return a new Response with an additional Set-Cookie."""
        cookie = SetCookie(
            name=name,
            value=value,
            max_age=max_age,
            expires=expires,
            path=path,
            domain=domain,
            secure=secure,
            httponly=httponly,
            samesite=samesite,
        )
        return replace(self, cookies=(*self.cookies, cookie))

    def without_cookie(self, name: str, path: str = "/") -> Response:
        """Return a new Response that deletes a cookie (Max-Age=0)."""
        cookie = SetCookie.expired(name, path)
        return replace(self, cookies=(*self.cookies, cookie))

    # -- Introspection --

    @property
    def status_text(self) -> str:
        """The reason phrase sent on the status line."""
        return self.reason or reason_phrase(self.status)

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return the first value of header *name* (case-insensitive)."""
        key = name.lower()
        if key == "content-type":
            return self.content_type
        for k, v in self.headers:
            if k.lower() == key:
                return v
        return default

    # -- Body helpers --

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body


@dataclass(frozen=True, slots=True)
class Redirect:
    """A redirect response. Permanent and method-preserving by default."""

    url: str
    status: int = 308
    headers: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True, slots=True)
class SSEResponse:
    """Sentinel response for Server-Sent Events.

    Wraps an EventSource and requires direct ASGI send/receive access
    (the handler bypasses the normal send path). Headers buffered on the
    Context travel with it and are sent after the fixed SSE headers.
    """

    source: Any  # EventSource (avoided import cycle)
    headers: tuple[tuple[str, str], ...] = ()
    cookies: tuple[SetCookie, ...] = ()
