"""Routing — segment trie keyed by method with O(path-depth) matching.

Routes are declared on a Registry and compiled into the trie when the
app composes.
"""

from wren.routing.route import Method, RouteEntry, RouteMatch
from wren.routing.router import Router

__all__ = ["Method", "RouteEntry", "RouteMatch", "Router"]
