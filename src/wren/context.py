"""Per-request Context.

One Context is created for every request and handed to middleware, the
handler and the error handler. It exposes the request read-only, buffers
response state (status, headers, cookies) until the response is built,
and resolves plugin singletons by attribute::

    async def show(ctx):
        user = await ctx.db.find(ctx.params["id"])   # plugin "db"
        ctx.set("Cache-Control", "no-store")
        return ctx.view("user.html", user)

``get_context()`` returns the Context of the running request.

Thread safety:
    ``ContextVar`` is task-local under asyncio. No locks needed.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from contextvars import ContextVar
from dataclasses import replace
from typing import Any, NoReturn

from wren.errors import HTTPError
from wren.http.cookies import SetCookie
from wren.http.headers import Headers, MutableHeaders
from wren.http.query import QueryParams
from wren.http.request import Request
from wren.http.response import Redirect, Response, SSEResponse
from wren.server.negotiation import negotiate

context_var: ContextVar[Context] = ContextVar("wren_context")
"""The active Context. Set by the dispatcher for the duration of a request."""


def get_context() -> Context:
    """Return the Context of the running request.

    Raises ``LookupError`` if called outside a request.
    """
    return context_var.get()


class Context:
    """Request facets (read-only) plus buffered response state."""

    __slots__ = (
        "_cookies",
        "_headers",
        "_plugins",
        "_redirected",
        "error",
        "params",
        "render",
        "render_tree",
        "request",
        "status",
        "status_text",
        "view",
    )

    def __init__(
        self,
        request: Request,
        *,
        view: Callable[..., Any] | None = None,
        render: Callable[..., Any] | None = None,
        render_tree: Callable[[Any], str] | None = None,
        plugins: Mapping[str, object] | None = None,
    ) -> None:
        self._plugins: Mapping[str, object] = plugins or {}
        self.request = request
        self.params: dict[str, str] = {}
        self.status: int = 200
        self.status_text: str = ""
        self.error: BaseException | None = None
        self.view = view or _missing("view")
        self.render = render or _missing("render")
        self.render_tree = render_tree or _missing("render_tree")
        self._headers = MutableHeaders()
        self._cookies: list[SetCookie] = []
        self._redirected = False

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails: resolve plugins
        try:
            plugins = object.__getattribute__(self, "_plugins")
        except AttributeError:
            raise AttributeError(name) from None
        try:
            return plugins[name]
        except KeyError:
            msg = f"'Context' has no attribute or plugin {name!r}"
            raise AttributeError(msg) from None

    def __repr__(self) -> str:
        return f"<Context {self.method} {self.path} status={self.status}>"

    # -- Request facets --

    @property
    def method(self) -> str:
        return self.request.method

    @property
    def path(self) -> str:
        return self.request.path

    @property
    def url(self) -> str:
        return self.request.url

    @property
    def query(self) -> QueryParams:
        return self.request.query

    @property
    def headers(self) -> Headers:
        """Request headers."""
        return self.request.headers

    @property
    def cookies(self) -> Mapping[str, str]:
        """Request cookies."""
        return self.request.cookies

    @property
    def remote_addr(self) -> str | None:
        return self.request.remote_addr

    async def body(self) -> bytes:
        return await self.request.body()

    async def text(self) -> str:
        return await self.request.text()

    async def json(self) -> Any:
        return await self.request.json()

    async def form(self) -> QueryParams:
        return await self.request.form()

    @property
    def plugins(self) -> Mapping[str, object]:
        return self._plugins

    # -- Response state --

    def throw(self, message: str, status: int = 500) -> NoReturn:
        """Abort the request with an HTTP error."""
        raise HTTPError(status=status, detail=message)

    def set(self, name: str, value: str) -> None:
        """Set a response header, replacing earlier values."""
        self._headers.set(name, value)

    def append(self, name: str, value: str) -> None:
        """Add another value for a response header."""
        self._headers.append(name, value)

    def delete(self, name: str) -> None:
        """Remove a response header."""
        self._headers.delete(name)

    def get(self, name: str) -> str | None:
        """Return a buffered response header."""
        return self._headers.get(name)

    @property
    def response_headers(self) -> tuple[tuple[str, str], ...]:
        return self._headers.items()

    def set_cookie(
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
    ) -> None:
        self._cookies.append(
            SetCookie(
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
        )

    def delete_cookie(self, name: str, path: str = "/") -> None:
        self._cookies.append(SetCookie.expired(name, path))

    def redirect(self, url: str, status: int = 308) -> None:
        """Redirect the client. The response body is suppressed."""
        self.status = status
        self._headers.set("location", url)
        self._redirected = True

    def reset(self) -> None:
        """Drop buffered redirect state. Used when entering the error path."""
        if self._redirected:
            self._headers.delete("location")
            self._redirected = False

    # -- Materialization --

    def build(self, body: Any = None) -> Response | SSEResponse:
        """Materialize the buffered state and *body* into a Response.

        A ``Response`` or ``Redirect`` returned by the handler keeps its own
        status; the Context's buffered headers and cookies are added to it.
        Any other body takes the Context's status and status text.
        """
        if self._redirected:
            body = None
        base = negotiate(body)
        content_type = self._headers.get("content-type")
        headers = tuple((k, v) for k, v in self._headers.items() if k != "content-type")
        cookies = tuple(self._cookies)

        if isinstance(base, SSEResponse):
            return replace(base, headers=(*base.headers, *headers), cookies=cookies)

        if not isinstance(body, Response | Redirect):
            base = replace(base, status=self.status, reason=self.status_text)
        if content_type is not None:
            base = replace(base, content_type=content_type)
        return replace(
            base,
            headers=(*base.headers, *headers),
            cookies=(*base.cookies, *cookies),
        )


def _missing(name: str) -> Callable[..., Any]:
    def unbound(*_args: Any, **_kwargs: Any) -> NoReturn:
        msg = f"No {name!r} collaborator is bound to this Context"
        raise RuntimeError(msg)

    return unbound
