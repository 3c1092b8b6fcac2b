"""Sequential middleware execution."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from wren._internal.invoke import invoke
from wren.registry import MiddlewareEntry

if TYPE_CHECKING:
    from wren.context import Context


async def run_middleware(chain: Iterable[MiddlewareEntry], ctx: Context) -> None:
    """Run each middleware against *ctx* in order.

    *chain* is expected to be sorted already (see
    ``Registry.middleware_chain``). An exception aborts the remaining
    middleware and the handler; the dispatcher routes it to the error path.
    """
    for entry in chain:
        await invoke(entry.handler, ctx)
