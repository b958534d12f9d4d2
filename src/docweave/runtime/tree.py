"""In-memory component tree.

The same :class:`Element` class is used on both sides of the transport
boundary. At build time ``Element.type`` is always a string: a built-in tag
(``"p"``, ``"h2"``), a component name (``"Note"``) or :data:`GROUPING_TYPE`.
After deserialization component names are replaced by the live component
callables and the grouping identifier by :class:`Fragment`.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

# Reserved identifier of the transparent grouping node. Not a valid Python
# identifier, so it can never be declared as a component name.
GROUPING_TYPE = "#group"

# First item of every serialized element.
NODE_MARKER = "$el"

# Build-time bookkeeping props, never transported.
DEBUG_TYPE = "debug_type"
ORIGINAL_TYPE = "original_type"
PARENT_NAME = "parent_name"
INTERNAL_PROPS = frozenset({DEBUG_TYPE, ORIGINAL_TYPE, PARENT_NAME})

COMPONENT_NAME_ATTR = "__component_name__"


class Fragment:
    """Grouping construct of the consuming side: renders its children only."""

    def __init__(self) -> None:
        msg = "Fragment is a type marker and cannot be instantiated"
        raise TypeError(msg)


@dataclass(slots=True)
class Element:
    """A node of the component tree."""

    type: Any
    key: str | None = None
    props: dict[str, Any] = field(default_factory=dict)

    @property
    def children(self) -> Any:
        return self.props.get("children")

    @property
    def is_grouping(self) -> bool:
        return self.type is Fragment or self.type == GROUPING_TYPE


def is_builtin_tag(name: str) -> bool:
    """Lowercase identifiers name built-in tags; everything else is a component."""
    return bool(name) and name[0].islower()


def iter_children(node: Any) -> list[Any]:
    """Return the children of ``node`` as a list, whatever their stored shape."""
    if not isinstance(node, Element):
        return []
    children = node.children
    if children is None:
        return []
    if isinstance(children, list | tuple):
        return list(children)
    return [children]


def component_name(type_: Any) -> str | None:
    """Return the registry name of a live component, if it carries one."""
    if isinstance(type_, str):
        return type_
    if type_ is Fragment:
        return GROUPING_TYPE
    name = getattr(type_, COMPONENT_NAME_ATTR, None)
    return name if isinstance(name, str) else None


def create_element(type_: str | Callable[..., Any], props: dict[str, Any] | None = None, *children: Any) -> Element:
    """Build an element; the only tree-construction primitive given to compiled code."""
    clean = dict(props or {})
    key = clean.pop("key", None)
    if key is not None:
        key = str(key)
    if len(children) == 1:
        clean["children"] = children[0]
    elif children:
        clean["children"] = list(children)
    if DEBUG_TYPE in clean:
        clean[ORIGINAL_TYPE] = type_
    return Element(type=type_, key=key, props=clean)
