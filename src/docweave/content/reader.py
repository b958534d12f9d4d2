"""Content store reader.

A logical document path such as ``learn/thinking`` is stored either as
``learn/thinking.md`` or as ``learn/thinking/index.md``; the flat layout wins
when both exist. The root document (no segments) is ``index.md``.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from docweave.content.frontmatter import parse_frontmatter
from docweave.exceptions import ContentNotFoundError

logger = logging.getLogger(__name__)

INDEX_NAME = "index"
DEFAULT_EXTENSION = ".md"


@dataclass(frozen=True, slots=True)
class Document:
    """A document read from the content store."""

    segments: tuple[str, ...]
    body: str
    meta: dict[str, Any] = field(default_factory=dict)
    source: Path | None = None

    @property
    def path(self) -> str:
        return "/".join(self.segments)

    @property
    def is_index(self) -> bool:
        return not self.segments


def candidate_files(
    root: Path, segments: Sequence[str], extensions: Sequence[str] = (DEFAULT_EXTENSION,)
) -> list[Path]:
    """Return the physical files that may hold ``segments``, in lookup order."""
    relative = "/".join(segments) or INDEX_NAME
    flat = [root / f"{relative}{ext}" for ext in extensions]
    nested = [root / relative / f"{INDEX_NAME}{ext}" for ext in extensions]
    return flat + nested


def _json_safe(value: Any) -> Any:
    """Coerce YAML scalars (dates, datetimes) into JSON-safe values."""
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [_json_safe(v) for v in value]
    if isinstance(value, datetime.date):
        return value.isoformat()
    return value


def _validate_segments(segments: Sequence[str]) -> tuple[str, ...]:
    path = "/".join(segments)
    for segment in segments:
        if not segment or segment in {".", ".."} or "/" in segment or "\\" in segment:
            raise ContentNotFoundError(path)
    return tuple(segments)


def read_document(
    root: Path, segments: Sequence[str], extensions: Sequence[str] = (DEFAULT_EXTENSION,)
) -> Document:
    """Read the document at ``segments`` below ``root`` and split its frontmatter.

    Raises:
        ContentNotFoundError: If neither ``<path><ext>`` nor ``<path>/index<ext>`` exists.

    """
    clean = _validate_segments(segments)
    candidates = candidate_files(root, clean, extensions)

    for candidate in candidates:
        try:
            raw = candidate.read_text(encoding="utf-8")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            continue
        meta, body = parse_frontmatter(raw)
        logger.debug("Read /%s from %s", "/".join(clean), candidate)
        return Document(segments=clean, body=body, meta=_json_safe(meta), source=candidate)

    raise ContentNotFoundError("/".join(clean), [str(c.relative_to(root)) for c in candidates])
