"""Lowers a markup tree into a compiled unit.

A compiled unit is Python-syntax module text of a deliberately tiny shape::

    # docweave compiled document, format 1
    import Note

    default = h("#group", {"debug_type": "#group"},
        h("h1", {"id": "intro"}, "Intro"),
        h(Note, {"debug_type": "Note", "title": "Hi"},
            h("p", {"parent_name": "Note"}, "Body"),
        ),
    )

Only :mod:`docweave.runtime.executor` runs it, and it interprets the syntax
tree rather than handing it to ``exec``.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from docweave.cache.fingerprint import CACHE_FORMAT_VERSION
from docweave.compiler.markup import MarkupNode
from docweave.runtime.executor import EXPORT, PRIMITIVE
from docweave.runtime.tree import DEBUG_TYPE, GROUPING_TYPE, PARENT_NAME

HEADER = f"# docweave compiled document, format {CACHE_FORMAT_VERSION}"
INDENT = "    "


def literal(value: Any) -> str:
    """Render a JSON-compatible value as a Python literal."""
    if value is None:
        return "None"
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, int | float):
        return repr(value)
    if isinstance(value, dict):
        items = ", ".join(f"{literal(str(k))}: {literal(v)}" for k, v in value.items())
        return "{" + items + "}"
    if isinstance(value, list | tuple):
        return "[" + ", ".join(literal(v) for v in value) + "]"
    msg = f"cannot lower value of type {type(value).__name__}"
    raise TypeError(msg)


def _props(node: MarkupNode, parent: str | None) -> dict[str, Any]:
    props: dict[str, Any] = {}
    if node.component:
        props[DEBUG_TYPE] = node.tag
    elif parent is not None:
        props[PARENT_NAME] = parent
    props.update(node.attrs)
    return props


def _emit(node: MarkupNode | str, parent: str | None, depth: int) -> str:
    if isinstance(node, str):
        return literal(node)
    type_expr = node.tag if node.component else literal(node.tag)
    props = _props(node, parent)
    head = f"{PRIMITIVE}({type_expr}, {literal(props) if props else 'None'}"
    if not node.children:
        return head + ")"
    pad = INDENT * (depth + 1)
    body = "".join(f"{pad}{_emit(child, node.tag, depth + 1)},\n" for child in node.children)
    return f"{head},\n{body}{INDENT * depth})"


def lower(root: MarkupNode, imports: Sequence[str]) -> str:
    """Produce module text for ``root`` wrapped in a grouping node."""
    head = f"{PRIMITIVE}({literal(GROUPING_TYPE)}, {literal({DEBUG_TYPE: GROUPING_TYPE})}"
    if root.children:
        body = "".join(f"{INDENT}{_emit(child, None, 1)},\n" for child in root.children)
        expression = f"{head},\n{body})"
    else:
        expression = head + ")"
    lines = [HEADER, *(f"import {name}" for name in imports), "", f"{EXPORT} = {expression}", ""]
    return "\n".join(lines)
