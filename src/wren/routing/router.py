"""Segment-trie router keyed by HTTP method.

Routes are added when the app composes. Each request walks the trie one
path segment at a time; literal children win over the parameter child,
with backtracking when the literal subtree dead-ends.
"""

import logging
from dataclasses import dataclass

from wren.errors import ConfigurationError, NotFound, RouteConflict
from wren.routing.route import Method, RouteEntry, RouteMatch

logger = logging.getLogger("wren.routing")


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route pattern.

    Literal:   ``/users``   (kind="literal")
    Param:     ``/:id``     (kind="param", name="id")
    Catch-all: ``/*path``   (kind="catch_all", name="path")
    """

    value: str
    kind: str = "literal"
    name: str = ""


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route pattern into segments.

    Examples::

        "/"                -> []
        "/users"           -> [PathSegment("users")]
        "/users/:id"       -> [PathSegment("users"), PathSegment(":id", "param", "id")]
        "/static/*path"    -> [PathSegment("static"), PathSegment("*path", "catch_all", "path")]

    A trailing slash is ignored, so ``/users/`` and ``/users`` are the same
    pattern.

    Raises:
        ConfigurationError: If the pattern does not start with ``/``, a
            parameter has no name, or a catch-all is not the last segment.
    """
    if not path.startswith("/"):
        msg = f"Route path must start with '/': {path!r}"
        raise ConfigurationError(msg)
    if path == "/":
        return []
    parts = path.rstrip("/").split("/")[1:]
    segments: list[PathSegment] = []
    for index, part in enumerate(parts):
        if part.startswith(":"):
            if len(part) == 1:
                msg = f"Empty parameter name in route {path!r}"
                raise ConfigurationError(msg)
            segments.append(PathSegment(part, "param", part[1:]))
        elif part.startswith("*"):
            if len(part) == 1:
                msg = f"Empty catch-all name in route {path!r}"
                raise ConfigurationError(msg)
            if index != len(parts) - 1:
                msg = f"Catch-all must be the last segment in route {path!r}"
                raise ConfigurationError(msg)
            segments.append(PathSegment(part, "catch_all", part[1:]))
        else:
            segments.append(PathSegment(part))
    return segments


@dataclass(frozen=True, slots=True)
class _Terminal:
    """A route ending at a trie position, with its own parameter names.

    ``names`` lists the route's parameter names in path order; matched
    values are bound to them by position.
    """

    route: RouteEntry
    names: tuple[str, ...]


class _TrieNode:
    """A node in the route trie."""

    __slots__ = ("catch_all", "children", "param_child", "param_names", "routes_by_method")

    def __init__(self) -> None:
        # Literal segment children: "users" -> node
        self.children: dict[str, _TrieNode] = {}
        # Parameter child, shared by every parameter name at this depth
        self.param_child: _TrieNode | None = None
        # On a parameter child: the name each method declared for this depth
        self.param_names: dict[str, str] = {}
        # Routes whose trailing catch-all starts at this depth, keyed by method
        self.catch_all: dict[str, _Terminal] = {}
        # Routes terminating at this node, keyed by method
        self.routes_by_method: dict[str, _Terminal] = {}


def _normalize(path: str) -> str:
    if len(path) > 1 and path.endswith("/"):
        return path.rstrip("/") or "/"
    return path


class Router:
    """Segment-trie router.

    Usage::

        router = Router()
        router.add(RouteEntry(Method.GET, "/users/:id", handler))
        match = router.match("GET", "/users/42")
        match.params  # {"id": "42"}

    Parameter names belong to each route: ``GET /users/:id`` and
    ``DELETE /users/:user_id`` share a trie position but bind their own
    names. Re-adding an identical entry is a no-op. Within one method, a
    different route for the same pattern shape, or a second parameter
    name at the same depth, is a conflict: by default the later
    registration wins and a warning is logged; with ``strict=True`` a
    ``RouteConflict`` is raised. Bindings are never renamed; every route
    keeps the names it declared.
    """

    __slots__ = ("_root", "_strict")

    def __init__(self, *, strict: bool = False) -> None:
        self._root = _TrieNode()
        self._strict = strict

    def add(self, route: RouteEntry) -> None:
        """Insert *route* into the trie under its method."""
        segments = parse_path(route.path)
        names = tuple(seg.name for seg in segments if seg.kind != "literal")
        terminal = _Terminal(route=route, names=names)
        node = self._root

        for seg in segments:
            if seg.kind == "catch_all":
                self._place(node.catch_all, terminal)
                return
            if seg.kind == "param":
                if node.param_child is None:
                    node.param_child = _TrieNode()
                node = node.param_child
                self._claim_name(node, route, seg.name)
            else:
                node = node.children.setdefault(seg.value, _TrieNode())

        self._place(node.routes_by_method, terminal)

    def _claim_name(self, node: _TrieNode, route: RouteEntry, name: str) -> None:
        key = str(route.method)
        declared = node.param_names.get(key)
        if declared is not None and declared != name:
            self._conflict(
                f"Parameter ':{name}' in {key} {route.path!r} collides with "
                f"':{declared}' at the same depth"
            )
        node.param_names[key] = name

    def _place(self, table: dict[str, _Terminal], terminal: _Terminal) -> None:
        route = terminal.route
        key = str(route.method)
        existing = table.get(key)
        if existing is not None:
            if existing.route == route:
                return
            message = f"Duplicate route {key} {route.path!r}"
            if existing.route.path != route.path:
                message += f" has the same shape as {existing.route.path!r}"
            self._conflict(message)
        table[key] = terminal

    def _conflict(self, message: str) -> None:
        if self._strict:
            raise RouteConflict(message)
        logger.warning("%s; last registration wins", message)

    @property
    def routes(self) -> list[RouteEntry]:
        """Return all registered routes.

        Traverses the trie to collect every RouteEntry.
        Useful for introspection.
        """
        result: list[RouteEntry] = []
        self._collect_routes(self._root, result)
        return result

    def _collect_routes(self, node: _TrieNode, result: list[RouteEntry]) -> None:
        """Recursively collect routes from the trie."""
        for table in (node.routes_by_method, node.catch_all):
            result.extend(terminal.route for terminal in table.values())

        for child in node.children.values():
            self._collect_routes(child, result)

        if node.param_child is not None:
            self._collect_routes(node.param_child, result)

    def find(self, method: str, path: str) -> RouteMatch | None:
        """Look up a route for exactly *method*; ``None`` when absent.

        The empty path never matches; ``/`` matches only the root route.
        """
        if not path.startswith("/"):
            return None
        path = _normalize(path)
        parts = [] if path == "/" else path[1:].split("/")
        return self._match_node(self._root, str(method).upper(), parts, 0, ())

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request, falling back to routes declared for ``ALL``.

        Raises ``NotFound`` if neither the exact method nor ``ALL`` has a
        route for the path.
        """
        found = self.find(method, path) or self.find(Method.ALL, path)
        if found is None:
            raise NotFound(f"No route matches {method} {path!r}")
        return found

    def _match_node(
        self,
        node: _TrieNode,
        method: str,
        parts: list[str],
        index: int,
        values: tuple[str, ...],
    ) -> RouteMatch | None:
        """Recursively match path parts against the trie.

        *values* holds the parameter segments consumed so far, in order.
        """
        # All parts consumed
        if index == len(parts):
            terminal = node.routes_by_method.get(method)
            if terminal is not None:
                return _bind(terminal, values)
            return None

        part = parts[index]

        # 1. Literal child first
        if part in node.children:
            result = self._match_node(node.children[part], method, parts, index + 1, values)
            if result is not None:
                return result

        # 2. Parameter child, any single non-empty segment
        if node.param_child is not None and part:
            result = self._match_node(
                node.param_child, method, parts, index + 1, (*values, part)
            )
            if result is not None:
                return result

        # 3. Catch-all
        terminal = node.catch_all.get(method)
        if terminal is not None:
            return _bind(terminal, (*values, "/".join(parts[index:])))

        return None


def _bind(terminal: _Terminal, values: tuple[str, ...]) -> RouteMatch:
    return RouteMatch(route=terminal.route, params=dict(zip(terminal.names, values, strict=True)))
