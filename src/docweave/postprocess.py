"""Post-processing of executed trees: table of contents and child filtering."""

from __future__ import annotations

from typing import Any

from docweave.runtime.tree import Element, iter_children
from docweave.utils.slugify import slugify

TOC_DEPTHS = {"h1": 1, "h2": 2, "h3": 3}


def text_content(node: Any) -> str:
    """Concatenated text of a node, for slugs and plain-text contexts."""
    if isinstance(node, str):
        return node
    if isinstance(node, int | float) and not isinstance(node, bool):
        return str(node)
    if isinstance(node, list | tuple):
        return "".join(text_content(child) for child in node)
    if isinstance(node, Element):
        return text_content(node.children)
    return ""


def toc_entry(heading: Element) -> dict[str, Any]:
    anchor = heading.props.get("id") or slugify(text_content(heading.children))
    return {"url": f"#{anchor}", "depth": TOC_DEPTHS[heading.type], "text": heading.children}


def prepare_tree(root: Element) -> tuple[list[dict[str, Any]], list[Any]]:
    """Split an executed document into its table of contents and content children.

    Whitespace-only text between blocks is dropped. Headings directly below the
    root feed the table of contents; each entry keeps the heading's children so
    inline markup such as ``code`` survives in the contents sidebar.
    """
    children = [child for child in iter_children(root) if not (isinstance(child, str) and not child.strip())]
    toc = [
        toc_entry(child)
        for child in children
        if isinstance(child, Element) and isinstance(child.type, str) and child.type in TOC_DEPTHS
    ]
    return toc, children
