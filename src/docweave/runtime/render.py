"""HTML rendering of live component trees."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from markupsafe import Markup, escape

from docweave.runtime.tree import INTERNAL_PROPS, Element, Fragment

VOID_ELEMENTS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"}
)

_ATTR_ALIASES = {"className": "class", "htmlFor": "for"}


def _attributes(props: dict[str, Any]) -> str:
    parts: list[str] = []
    for name, value in props.items():
        if name == "children" or name in INTERNAL_PROPS or value is None or value is False:
            continue
        attr = _ATTR_ALIASES.get(name, name)
        if value is True:
            parts.append(f" {attr}")
        elif isinstance(value, str | int | float):
            parts.append(f' {attr}="{escape(value)}"')
    return "".join(parts)


def _component_props(props: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in props.items() if k not in INTERNAL_PROPS}


def iter_html(node: Any) -> Iterator[str]:
    """Yield HTML fragments for ``node``."""
    if node is None or isinstance(node, bool):
        return
    if isinstance(node, str):
        yield str(escape(node))
    elif isinstance(node, int | float):
        yield str(node)
    elif isinstance(node, list | tuple):
        for child in node:
            yield from iter_html(child)
    elif isinstance(node, Element):
        yield from _iter_element(node)
    else:
        msg = f"cannot render {type(node).__name__}"
        raise TypeError(msg)


def _iter_element(element: Element) -> Iterator[str]:
    if element.type is Fragment:
        yield from iter_html(element.children)
    elif isinstance(element.type, str):
        tag = element.type
        yield f"<{tag}{_attributes(element.props)}>"
        if tag in VOID_ELEMENTS:
            return
        yield from iter_html(element.children)
        yield f"</{tag}>"
    elif callable(element.type):
        yield from iter_html(element.type(**_component_props(element.props)))
    else:
        msg = f"element type {element.type!r} is not renderable"
        raise TypeError(msg)


def render_html(node: Any) -> Markup:
    """Render a live component tree to safe HTML."""
    return Markup("".join(iter_html(node)))
