"""Markdown front-end: turns a document body into an intermediate markup tree.

Bodies are CommonMark with embedded component tags, for example::

    import Note

    <Note title="Heads up">

    Some *Markdown* inside a component.

    </Note>

Uppercase tags are components and must be declared by an ``import`` directive;
lowercase tags are plain HTML elements. Attribute values are quoted strings,
``{json}`` expressions, or bare names meaning ``True``.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from markdown_it import MarkdownIt

from docweave.compiler.plugins import MarkdownPlugin

if TYPE_CHECKING:
    from markdown_it.rules_block import StateBlock
    from markdown_it.rules_inline import StateInline
    from markdown_it.token import Token

DIRECTIVE_RE = re.compile(r"^import\s+(\S+?)\s*;?\s*$")
IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_TAG_OPEN = re.compile(r"<([A-Za-z][A-Za-z0-9_.-]*)")
_TAG_CLOSE = re.compile(r"</([A-Za-z][A-Za-z0-9_.-]*)\s*>")
_ATTR_NAME = re.compile(r"[A-Za-z_:][A-Za-z0-9_:.-]*")
_UNQUOTED = re.compile(r"[^\s\"'=<>`/]+")
_COMPONENT_START = re.compile(r"</?[A-Z]")

# Deepest element nesting a document may use; keeps every recursive pass in bounds.
MAX_NESTING = 100

VOID_TAGS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"}
)


class MarkupError(ValueError):
    """Malformed markup; the compiler re-raises it with the document path."""


@dataclass
class MarkupNode:
    """Element of the intermediate tree."""

    tag: str
    attrs: dict[str, Any] = field(default_factory=dict)
    children: list[MarkupNode | str] = field(default_factory=list)
    component: bool = False

    def append(self, child: MarkupNode | str) -> None:
        if isinstance(child, str):
            if not child:
                return
            if self.children and isinstance(self.children[-1], str):
                self.children[-1] += child
                return
        self.children.append(child)


def split_directives(source: str) -> tuple[list[str], str]:
    """Split leading ``import Name`` lines from the Markdown that follows."""
    lines = source.splitlines(keepends=True)
    names: list[str] = []
    index = 0
    for index, line in enumerate(lines):
        stripped = line.strip()
        if not stripped:
            continue
        if not stripped.startswith("import "):
            break
        match = DIRECTIVE_RE.match(stripped)
        if match is None or not IDENTIFIER_RE.match(match.group(1)):
            msg = f"malformed import directive: {stripped!r}"
            raise MarkupError(msg)
        names.append(match.group(1))
    else:
        index = len(lines)
    return names, "".join(lines[index:])


def tag_end(text: str, pos: int) -> int:
    """Return the index just past the tag starting at ``pos``."""
    close = _TAG_CLOSE.match(text, pos)
    if close is not None:
        return close.end()
    opening = _TAG_OPEN.match(text, pos)
    if opening is None:
        msg = f"not a tag: {text[pos:pos + 20]!r}"
        raise MarkupError(msg)
    return _parse_attrs(text, opening.end())[2]


def _component_block(state: StateBlock, start_line: int, end_line: int, silent: bool) -> bool:
    if state.sCount[start_line] - state.blkIndent >= 4:
        return False
    pos = state.bMarks[start_line] + state.tShift[start_line]
    if _COMPONENT_START.match(state.src, pos, state.eMarks[start_line]) is None:
        return False
    if silent:
        return True
    next_line = start_line + 1
    while next_line < end_line and not state.isEmpty(next_line):
        next_line += 1
    token = state.push("html_block", "", 0)
    token.map = [start_line, next_line]
    token.content = state.getLines(start_line, next_line, state.blkIndent, True)
    state.line = next_line
    return True


def _component_inline(state: StateInline, silent: bool) -> bool:
    src = state.src[: state.posMax]
    if _COMPONENT_START.match(src, state.pos) is None:
        return False
    try:
        end = tag_end(src, state.pos)
    except MarkupError:
        return False
    if not silent:
        token = state.push("html_inline", "", 0)
        token.content = src[state.pos : end]
    state.pos = end
    return True


def component_tags(md: MarkdownIt) -> None:
    """Recognize component tags whose attributes plain HTML syntax would reject.

    CommonMark only treats ``<Tag ...>`` as HTML when the attributes are valid
    HTML, which ``{json}`` expressions with spaces or quotes are not. A
    component tag opening a line starts a block that runs to the next blank
    line, like a CommonMark HTML block.
    """
    md.block.ruler.before("html_block", "component_block", _component_block)
    md.inline.ruler.before("html_inline", "component_inline", _component_inline)


def create_parser(plugins: Sequence[MarkdownPlugin] = ()) -> MarkdownIt:
    """CommonMark with tables, strikethrough, raw HTML and component tags, plus ``plugins``."""
    md = MarkdownIt("commonmark", {"html": True}).enable(["table", "strikethrough"]).use(component_tags)
    for plugin in plugins:
        md.use(plugin)
    return md


def _read_braced(text: str, start: int) -> tuple[str, int]:
    """Return the contents of the ``{...}`` group at ``start`` and the index after it."""
    depth = 0
    quote: str | None = None
    pos = start
    while pos < len(text):
        char = text[pos]
        if quote:
            if char == "\\":
                pos += 1
            elif char == quote:
                quote = None
        elif char in "\"'":
            quote = char
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start + 1 : pos], pos + 1
        pos += 1
    msg = f"unterminated attribute expression: {text[start:start + 40]!r}"
    raise MarkupError(msg)


def _parse_expression(source: str) -> Any:
    try:
        value = json.loads(source)
    except json.JSONDecodeError as e:
        msg = f"invalid attribute expression {{{source}}}: {e.msg}"
        raise MarkupError(msg) from e
    if isinstance(value, float) and not math.isfinite(value):
        msg = f"non-finite number in attribute expression {{{source}}}"
        raise MarkupError(msg)
    try:
        json.dumps(value, ensure_ascii=False).encode("utf-8")
    except UnicodeEncodeError as e:
        msg = f"unpaired surrogate in attribute expression {{{source}}}"
        raise MarkupError(msg) from e
    return value


def _parse_attrs(text: str, pos: int) -> tuple[dict[str, Any], bool, int]:
    """Parse attributes up to the end of a tag. Returns (attrs, self_closing, end)."""
    attrs: dict[str, Any] = {}
    while True:
        while pos < len(text) and text[pos].isspace():
            pos += 1
        if text.startswith("/>", pos):
            return attrs, True, pos + 2
        if text.startswith(">", pos):
            return attrs, False, pos + 1
        name_match = _ATTR_NAME.match(text, pos)
        if name_match is None:
            msg = f"unexpected character in tag: {text[pos:pos + 20]!r}"
            raise MarkupError(msg)
        name = name_match.group(0)
        pos = name_match.end()
        while pos < len(text) and text[pos].isspace():
            pos += 1
        if not text.startswith("=", pos):
            attrs[name] = True
            continue
        pos += 1
        while pos < len(text) and text[pos].isspace():
            pos += 1
        if pos >= len(text):
            break
        char = text[pos]
        if char in "\"'":
            end = text.find(char, pos + 1)
            if end == -1:
                break
            attrs[name] = text[pos + 1 : end]
            pos = end + 1
        elif char == "{":
            source, pos = _read_braced(text, pos)
            attrs[name] = _parse_expression(source)
        else:
            value_match = _UNQUOTED.match(text, pos)
            if value_match is None:
                break
            attrs[name] = value_match.group(0)
            pos = value_match.end()
    msg = f"unterminated tag: {text[:60]!r}"
    raise MarkupError(msg)


class TreeBuilder:
    """Builds a :class:`MarkupNode` tree from a markdown-it token stream."""

    def __init__(self, components: Sequence[str]) -> None:
        self.components = set(components)
        self.root = MarkupNode(tag="")
        self.stack: list[MarkupNode] = [self.root]

    @property
    def top(self) -> MarkupNode:
        return self.stack[-1]

    def build(self, tokens: Sequence[Token]) -> MarkupNode:
        for token in tokens:
            self._token(token)
        if len(self.stack) > 1:
            msg = f"unclosed <{self.top.tag}>"
            raise MarkupError(msg)
        return self.root

    def _open(self, node: MarkupNode) -> None:
        if len(self.stack) > MAX_NESTING:
            msg = f"document nests too deeply (more than {MAX_NESTING} levels at <{node.tag}>)"
            raise MarkupError(msg)
        self.top.append(node)
        self.stack.append(node)

    def _close(self, tag: str, *, component: bool) -> None:
        node = self.top
        if node is self.root or node.tag != tag or node.component != component:
            expected = f"</{node.tag}>" if node is not self.root else "nothing"
            msg = f"unexpected </{tag}>, expected {expected}"
            raise MarkupError(msg)
        self.stack.pop()

    def _token(self, token: Token) -> None:
        if token.nesting == 1:
            if token.hidden:
                return
            self._open(MarkupNode(tag=token.tag, attrs=dict(token.attrs)))
        elif token.nesting == -1:
            if token.hidden:
                return
            self._close(token.tag, component=False)
        else:
            self._leaf(token)

    def _leaf(self, token: Token) -> None:
        kind = token.type
        if kind == "inline":
            for child in token.children or []:
                self._token(child)
        elif kind in {"text", "text_special"}:
            self.top.append(token.content)
        elif kind == "softbreak":
            self.top.append("\n")
        elif kind == "hardbreak":
            self.top.append(MarkupNode(tag="br"))
        elif kind == "code_inline":
            self.top.append(MarkupNode(tag="code", children=[token.content]))
        elif kind in {"code_block", "fence"}:
            info = token.info.strip().split(maxsplit=1)[0] if token.info.strip() else ""
            code_attrs = {"class": f"language-{info}"} if info else {}
            code = MarkupNode(tag="code", attrs=code_attrs, children=[token.content])
            self.top.append(MarkupNode(tag="pre", children=[code]))
        elif kind == "image":
            attrs = dict(token.attrs)
            attrs["alt"] = token.content
            self.top.append(MarkupNode(tag="img", attrs=attrs))
        elif kind in {"html_block", "html_inline"}:
            self._html(token.content, block=kind == "html_block")
        elif token.tag:
            self.top.append(MarkupNode(tag=token.tag, attrs=dict(token.attrs)))
        elif token.content:
            self.top.append(token.content)

    def _html(self, text: str, *, block: bool) -> None:
        pos = 0
        while pos < len(text):
            lt = text.find("<", pos)
            if lt == -1:
                self._raw_text(text[pos:], block=block)
                return
            self._raw_text(text[pos:lt], block=block)
            if text.startswith("<!--", lt):
                end = text.find("-->", lt + 4)
                pos = len(text) if end == -1 else end + 3
                continue
            close = _TAG_CLOSE.match(text, lt)
            if close is not None:
                name = close.group(1)
                self._close(name, component=self._is_component(name))
                pos = close.end()
                continue
            opening = _TAG_OPEN.match(text, lt)
            if opening is None:
                self._raw_text("<", block=block)
                pos = lt + 1
                continue
            name = opening.group(1)
            attrs, self_closing, pos = _parse_attrs(text, opening.end())
            self._tag(name, attrs, self_closing=self_closing)

    def _raw_text(self, text: str, *, block: bool) -> None:
        if block and not text.strip():
            return
        self.top.append(text)

    def _is_component(self, name: str) -> bool:
        return name[0].isupper()

    def _tag(self, name: str, attrs: dict[str, Any], *, self_closing: bool) -> None:
        component = self._is_component(name)
        if component and name not in self.components:
            msg = f"<{name}> is not an imported component"
            raise MarkupError(msg)
        node = MarkupNode(tag=name, attrs=attrs, component=component)
        if self_closing or (not component and name.lower() in VOID_TAGS):
            self.top.append(node)
        else:
            self._open(node)


def parse_markup(markdown: str, components: Sequence[str], plugins: Sequence[MarkdownPlugin] = ()) -> MarkupNode:
    """Parse ``markdown`` into a tree rooted at an anonymous node."""
    tokens = create_parser(plugins).parse(markdown)
    return TreeBuilder(components).build(tokens)
