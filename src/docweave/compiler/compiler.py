"""Document compiler and its cache-aware front door."""

from __future__ import annotations

import keyword
import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from docweave.cache.fingerprint import CACHE_FORMAT_VERSION, fingerprint
from docweave.compiler.codegen import lower
from docweave.compiler.markup import MarkupError, parse_markup, split_directives
from docweave.compiler.plugins import DEFAULT_PLUGINS, MarkdownPlugin, plugin_signature
from docweave.exceptions import CompileError
from docweave.runtime.tree import GROUPING_TYPE, NODE_MARKER

if TYPE_CHECKING:
    from pathlib import Path

    from docweave.cache.compile_cache import CompileCache

logger = logging.getLogger(__name__)

CompileFn = Callable[..., str]


def validate_component_names(names: Sequence[str], *, path: str | None = None) -> list[str]:
    """Check declared component names and return them as an ordered list.

    Names must be unique identifiers starting with an uppercase letter and
    may not equal the reserved grouping identifier or the node marker.
    """
    ordered = list(names)
    seen: set[str] = set()
    for name in ordered:
        if name in {GROUPING_TYPE, NODE_MARKER}:
            raise CompileError(path, f"component name {name!r} is reserved")
        if not name.isidentifier() or keyword.iskeyword(name) or not name[0].isupper():
            raise CompileError(path, f"invalid component name {name!r}")
        if name in seen:
            raise CompileError(path, f"component {name!r} declared twice")
        seen.add(name)
    return ordered


def compile_document(
    body: str,
    component_names: Sequence[str],
    *,
    plugins: Sequence[MarkdownPlugin] = DEFAULT_PLUGINS,
    path: str | None = None,
) -> str:
    """Compile a Markdown body into a compiled unit.

    IMPORTANT: keep this a pure function. Its output is cached on disk and
    replayed verbatim, so it may depend on nothing but its arguments.

    Raises:
        CompileError: On malformed markup or a directive naming an undeclared component.

    """
    declared = validate_component_names(component_names, path=path)
    # Explicit imports keep every component visible as a named reference in
    # the output instead of being folded into plain markup.
    directives = "".join(f"import {name}\n" for name in declared)
    source = f"{directives}\n{body}"

    try:
        imports, markdown = split_directives(source)
        unknown = [name for name in imports if name not in declared]
        if unknown:
            raise CompileError(path, f"unresolvable import directive for {', '.join(unknown)}")
        tree = parse_markup(markdown, declared, plugins)
        # user-written directives repeat declared names; import each once
        return lower(tree, list(dict.fromkeys(imports)))
    except MarkupError as e:
        raise CompileError(path, str(e)) from e
    except RecursionError as e:
        # deeply nested attribute expressions
        raise CompileError(path, "document nests too deeply") from e


def read_lockfile(path: Path) -> str:
    """Return the lockfile contents, or an empty string when there is none."""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("No lockfile at %s; cache keys ignore dependencies", path)
        return ""


class CachedCompiler:
    """Memoizes :func:`compile_document` through a :class:`CompileCache`."""

    def __init__(
        self,
        cache: CompileCache,
        *,
        lockfile: str = "",
        plugins: Sequence[MarkdownPlugin] = DEFAULT_PLUGINS,
        compile_fn: CompileFn = compile_document,
    ) -> None:
        self.cache = cache
        self.lockfile = lockfile
        self.plugins = tuple(plugins)
        self._compile_fn = compile_fn
        if self.plugins == DEFAULT_PLUGINS:
            self.version: int | str = CACHE_FORMAT_VERSION
        else:
            self.version = f"{CACHE_FORMAT_VERSION}+{plugin_signature(self.plugins)}"

    def cache_key(self, body: str, component_names: Sequence[str]) -> str:
        return fingerprint(body, component_names, self.lockfile, self.version)

    def compile(self, body: str, component_names: Sequence[str], *, path: str | None = None) -> str:
        """Return the compiled unit for ``body``, compiling only on a cache miss."""
        key = self.cache_key(body, component_names)
        cached = self.cache.get(key)
        if cached is not None:
            logger.info("Reading compiled document for /%s from cache", path or "")
            return cached

        logger.debug("Cache miss for /%s (%s)", path or "", key)
        code = self._compile_fn(body, component_names, plugins=self.plugins, path=path)
        self.cache.set(key, code)
        return code
