"""Component tree -> JSON transport format.

Every element is written as a four item array::

    ["$el", identifier, key, props]

``identifier`` is always a string: a built-in tag, a component name or the
grouping identifier. Build-time bookkeeping props are dropped. Everything else
is plain JSON.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from docweave.runtime.tree import DEBUG_TYPE, INTERNAL_PROPS, NODE_MARKER, Element, component_name

logger = logging.getLogger(__name__)


def element_identifier(element: Element) -> str:
    """Return the transportable name of ``element.type``.

    A revived component keeps the name it was looked up under in its
    ``debug_type`` prop; that name wins over the one the implementation was
    registered with, so aliases survive another round trip.
    """
    name: Any = None
    if not isinstance(element.type, str):
        name = element.props.get(DEBUG_TYPE)
    if not isinstance(name, str) or not name:
        name = component_name(element.type)
    if not isinstance(name, str) or not name:
        msg = f"cannot serialize element of anonymous type {element.type!r}"
        raise TypeError(msg)
    return name


def clean_props(props: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in props.items() if k not in INTERNAL_PROPS}


def encode_node(value: Any) -> Any:
    """``default`` hook for :func:`json.dumps`; turns elements into tagged arrays."""
    if isinstance(value, Element):
        return [NODE_MARKER, element_identifier(value), value.key, clean_props(value.props)]
    msg = f"Object of type {type(value).__name__} is not serializable in a component tree"
    raise TypeError(msg)


def serialize(node: Any) -> str:
    """Serialize a component tree (or any JSON value containing elements) to JSON text."""
    return json.dumps(node, default=encode_node, ensure_ascii=False, separators=(",", ":"))
