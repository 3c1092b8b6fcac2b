"""Markup trees: build HTML in Python and render it to a string.

Handlers may return an ``Element``; the dispatcher renders it with
``render_tree`` behind a ``<!DOCTYPE html>`` prologue::

    from wren.markup import h

    def index(ctx):
        return h("html", None,
            h("body", {"class": "home"},
                h("h1", None, "Hello, ", ctx.params.get("name", "world"))))

A callable tag is a functional component: it receives the props (with
``children``) and returns another node.
"""

import html
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from kida.template import Markup

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    }
)


@dataclass(frozen=True, slots=True)
class Element:
    """A node of a markup tree."""

    tag: str | Callable[..., Any]
    props: Mapping[str, Any] = field(default_factory=dict)
    children: tuple[Any, ...] = ()


class _Fragment:
    """Sentinel tag: renders only its children."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "Fragment"


Fragment = _Fragment()


def h(tag: str | Callable[..., Any], props: Mapping[str, Any] | None = None, *children: Any) -> Element:
    """Create an Element. Mirrors the ``createElement(tag, props, ...children)`` shape."""
    return Element(tag, dict(props or {}), children)


def render_tree(node: Any) -> str:
    """Render a markup tree to an HTML string.

    Text is escaped; ``Markup`` (kida's safe string) passes through.
    ``None``, ``True`` and ``False`` children render nothing; lists and
    tuples are flattened.
    """
    parts: list[str] = []
    _render(node, parts)
    return "".join(parts)


def _render(node: Any, out: list[str]) -> None:
    match node:
        case None | bool():
            return
        case Markup():
            out.append(str(node))
        case str():
            out.append(html.escape(node, quote=False))
        case int() | float():
            out.append(str(node))
        case Element(tag=tag, props=props, children=children):
            if tag is Fragment:
                _render_children(children, out)
            elif callable(tag):
                _render(tag({**props, "children": children}), out)
            else:
                out.append(f"<{tag}{_attributes(props)}>")
                if tag in VOID_ELEMENTS:
                    return
                _render_children(children, out)
                out.append(f"</{tag}>")
        case list() | tuple():
            _render_children(node, out)
        case _:
            out.append(html.escape(str(node), quote=False))


def _render_children(children: Iterable[Any], out: list[str]) -> None:
    for child in children:
        _render(child, out)


def _attributes(props: Mapping[str, Any]) -> str:
    parts: list[str] = []
    for name, value in props.items():
        if name == "children" or value is None or value is False:
            continue
        attr = "class" if name == "className" else name
        if value is True:
            parts.append(f" {attr}")
        else:
            parts.append(f' {attr}="{html.escape(str(value), quote=True)}"')
    return "".join(parts)
