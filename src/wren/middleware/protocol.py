"""Middleware protocol.

A middleware is any callable matching::

    def my_mw(ctx: Context) -> None: ...
    async def my_mw(ctx: Context) -> None: ...

No base class required. The framework checks the shape, not the lineage.
Middleware runs before the handler and communicates through the Context:
it may set headers, attach state, redirect, or raise to abort the
request. Middleware is global; skipping routes is its own job::

    def api_only(ctx):
        if not ctx.path.startswith("/api/"):
            return
        if "authorization" not in ctx.headers:
            ctx.throw("Unauthorized", 401)
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from wren.context import Context


class Middleware(Protocol):
    """Protocol for wren middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def timing(ctx: Context) -> None:
            ctx.set("X-Started", str(time.time()))

        # Class middleware
        class RateLimiter:
            async def __call__(self, ctx: Context) -> None:
                ...
    """

    def __call__(self, ctx: Context) -> None | Awaitable[None]: ...
