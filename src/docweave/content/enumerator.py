"""Static target discovery: every document file becomes one logical path."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from docweave.content.reader import INDEX_NAME

logger = logging.getLogger(__name__)


def segments_for(relative: Path) -> tuple[str, ...]:
    """Map a content-relative file path to logical path segments.

    ``foo/bar/baz.md`` -> ``("foo", "bar", "baz")``
    ``foo/bar/qux/index.md`` -> ``("foo", "bar", "qux")``
    """
    parts = [*relative.parent.parts, relative.stem]
    if parts[-1] == INDEX_NAME:
        parts.pop()
    return tuple(parts)


def enumerate_paths(root: Path, extensions: Iterable[str] = (".md",)) -> list[tuple[str, ...]]:
    """Recursively collect the logical path of every document below ``root``.

    The result is sorted and free of duplicates. When both ``a.md`` and
    ``a/index.md`` exist they name the same logical path; the reader serves
    the flat file, and the path is listed once.
    """
    suffixes = tuple(extensions)
    seen: dict[tuple[str, ...], Path] = {}
    for file in sorted(root.rglob("*")):
        if not file.is_file() or not file.name.endswith(suffixes):
            continue
        segments = segments_for(file.relative_to(root))
        if segments in seen:
            logger.warning("Both %s and %s map to /%s", seen[segments], file, "/".join(segments))
            continue
        seen[segments] = file
    return sorted(seen)
