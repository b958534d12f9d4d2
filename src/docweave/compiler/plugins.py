"""markdown-it plugins applied by the document compiler.

A plugin is any callable taking the :class:`markdown_it.MarkdownIt` instance,
the same contract as ``MarkdownIt.use``. Plugins must be deterministic:
their effect ends up in the compile cache.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import TYPE_CHECKING

from docweave.utils.slugify import slugify

if TYPE_CHECKING:
    from markdown_it import MarkdownIt
    from markdown_it.rules_core import StateCore
    from markdown_it.token import Token

MarkdownPlugin = Callable[["MarkdownIt"], None]

_CUSTOM_ID = re.compile(r"\s*\{#([A-Za-z0-9_-]+)\}\s*$")


def _heading_text(inline: Token) -> str:
    return "".join(child.content for child in inline.children or [] if child.type in {"text", "code_inline"})


def _strip_custom_id(inline: Token) -> str | None:
    """Remove a trailing ``{#custom-id}`` from the heading and return the id."""
    children = inline.children or []
    if not children or children[-1].type != "text":
        return None
    last = children[-1]
    match = _CUSTOM_ID.search(last.content)
    if match is None:
        return None
    last.content = last.content[: match.start()]
    inline.content = _CUSTOM_ID.sub("", inline.content)
    return match.group(1)


def _heading_ids_rule(state: StateCore) -> None:
    used: dict[str, int] = {}
    tokens = state.tokens
    for index, token in enumerate(tokens):
        if token.type != "heading_open" or index + 1 >= len(tokens):
            continue
        inline = tokens[index + 1]
        slug = _strip_custom_id(inline) or slugify(_heading_text(inline))
        count = used.get(slug, 0)
        used[slug] = count + 1
        token.attrSet("id", slug if count == 0 else f"{slug}-{count}")


def heading_ids(md: MarkdownIt) -> None:
    """Give every heading an ``id`` attribute.

    ``## Title {#custom}`` pins the id; otherwise it is the slug of the
    heading text, de-duplicated within the document.
    """
    md.core.ruler.push("heading_ids", _heading_ids_rule)


DEFAULT_PLUGINS: tuple[MarkdownPlugin, ...] = (heading_ids,)


def plugin_signature(plugins: tuple[MarkdownPlugin, ...]) -> str:
    """Stable description of a plugin list, folded into cache keys."""
    return ",".join(f"{getattr(p, '__module__', '?')}.{getattr(p, '__qualname__', repr(p))}" for p in plugins)
