"""Helpers for parsing YAML frontmatter from Markdown content."""

from __future__ import annotations

import logging
from typing import Any

import frontmatter
import yaml

logger = logging.getLogger(__name__)


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Parse YAML frontmatter using python-frontmatter.

    Args:
        content: Markdown content that may include frontmatter.

    Returns:
        Tuple of (metadata dict, body string). If parsing fails or metadata is not a
        mapping, metadata will be an empty dict and the original content is returned.

    """
    try:
        parsed = frontmatter.loads(content)
    except (yaml.YAMLError, ValueError) as exc:
        logger.warning("Failed to parse frontmatter content: %s", exc)
        return {}, content

    raw_metadata = parsed.metadata or {}
    if not isinstance(raw_metadata, dict):
        logger.warning("Frontmatter metadata is not a mapping: %s", type(raw_metadata).__name__)
        metadata: dict[str, Any] = {}
    else:
        metadata = dict(raw_metadata)

    body = parsed.content if isinstance(parsed.content, str) else str(parsed.content)
    return metadata, body
