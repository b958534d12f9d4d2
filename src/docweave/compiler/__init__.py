"""Document compilation: Markdown with components in, compiled units out."""

from docweave.compiler.compiler import CachedCompiler, compile_document, read_lockfile, validate_component_names
from docweave.compiler.plugins import DEFAULT_PLUGINS, heading_ids

__all__ = [
    "DEFAULT_PLUGINS",
    "CachedCompiler",
    "compile_document",
    "heading_ids",
    "read_lockfile",
    "validate_component_names",
]
