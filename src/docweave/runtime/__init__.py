"""Component tree runtime: building, executing, transporting and rendering trees.

Key Components:
- `Element` / `Fragment`: the tree node and the grouping construct.
- `execute`: materializes a compiled unit into a tree at build time.
- `serialize` / `deserialize`: the name-based transport format.
- `render_html`: renders a live tree on the consuming side.
"""

from docweave.runtime.deserializer import deserialize
from docweave.runtime.executor import execute
from docweave.runtime.render import render_html
from docweave.runtime.serializer import serialize
from docweave.runtime.tree import GROUPING_TYPE, NODE_MARKER, Element, Fragment, create_element

__all__ = [
    "GROUPING_TYPE",
    "NODE_MARKER",
    "Element",
    "Fragment",
    "create_element",
    "deserialize",
    "execute",
    "render_html",
    "serialize",
]
