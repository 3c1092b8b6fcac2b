"""Route, RouteMatch and Method definitions."""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class Method(StrEnum):
    """HTTP methods a route can be declared for.

    ``ALL`` is a wildcard bucket consulted when no route is declared for
    the exact request method.
    """

    ALL = "ALL"
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


@dataclass(frozen=True, slots=True)
class RouteEntry:
    """A declared route.

    ``path`` uses ``:name`` parameter segments and an optional trailing
    ``*name`` catch-all. When ``template`` is set, the handler's return
    value is rendered through that template.
    """

    method: Method
    path: str
    handler: Callable[..., Any]
    template: str | None = None


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: RouteEntry
    params: dict[str, str] = field(default_factory=dict)
