"""JSON transport format -> live component tree.

Runs on the consuming side. Component names are looked up in a registry of
concrete implementations; the grouping identifier becomes :class:`Fragment`.
A name missing from the registry is not fatal: it produces one
:class:`UnresolvedComponentWarning` and renders as a fragment so the page
still shows the element's children.
"""

from __future__ import annotations

import json
import warnings
from collections.abc import Callable, Mapping
from typing import Any

from docweave.exceptions import UnresolvedComponentWarning
from docweave.runtime.tree import (
    DEBUG_TYPE,
    GROUPING_TYPE,
    NODE_MARKER,
    Element,
    Fragment,
    component_name,
    is_builtin_tag,
)

Component = Callable[..., Any]
Registry = Mapping[str, Component]


def is_encoded_element(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) == 4
        and value[0] == NODE_MARKER
        and (value[2] is None or isinstance(value[2], str))
        and (value[3] is None or isinstance(value[3], dict))
    )


def _warn_unresolved(name: str) -> None:
    # A fresh registry per call: the default filter would otherwise report a
    # name once per process, not once per payload that references it.
    warnings.warn_explicit(
        UnresolvedComponentWarning(name),
        UnresolvedComponentWarning,
        __file__,
        0,
        module=__name__,
        registry={},
    )


def _fragment(key: str | None, props: dict[str, Any]) -> Element:
    kept = {"children": props["children"]} if "children" in props else {}
    return Element(type=Fragment, key=key, props=kept)


def revive_element(identifier: Any, key: str | None, props: dict[str, Any] | None, registry: Registry) -> Element:
    """Rebuild one element from its decoded parts."""
    props = props or {}
    if identifier == GROUPING_TYPE:
        return _fragment(key, props)
    if isinstance(identifier, str) and is_builtin_tag(identifier):
        return Element(type=identifier, key=key, props=props)

    implementation = registry.get(identifier) if isinstance(identifier, str) else None
    if implementation is None:
        _warn_unresolved(str(identifier))
        return _fragment(key, props)
    if component_name(implementation) != identifier:
        # keeps the lookup name for re-serialization (undecorated or aliased implementation)
        props = {**props, DEBUG_TYPE: identifier}
    return Element(type=implementation, key=key, props=props)


def revive(value: Any, registry: Registry) -> Any:
    """Revive every encoded element inside a decoded JSON value, innermost first."""
    if isinstance(value, list):
        items = [revive(item, registry) for item in value]
        if is_encoded_element(items):
            _, identifier, key, props = items
            return revive_element(identifier, key, props, registry)
        return items
    if isinstance(value, dict):
        return {k: revive(v, registry) for k, v in value.items()}
    return value


def deserialize(text: str, registry: Registry) -> Any:
    """Parse serialized JSON and resolve component names against ``registry``."""
    return revive(json.loads(text), registry)
