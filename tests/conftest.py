from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from docweave.config import BuildSettings, DocweaveConfig, PathsSettings


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    path = tmp_path / "content"
    path.mkdir()
    return path


@pytest.fixture
def write_files(content_dir: Path) -> Callable[[dict[str, str]], Path]:
    """Create files (relative path -> text) below the content directory."""

    def _write(files: dict[str, str]) -> Path:
        for relative, text in files.items():
            target = content_dir / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
        return content_dir

    return _write


@pytest.fixture
def site_config(tmp_path: Path, content_dir: Path) -> DocweaveConfig:
    """A config rooted at ``tmp_path`` that builds sequentially."""
    return DocweaveConfig(
        paths=PathsSettings(site_root=tmp_path),
        build=BuildSettings(workers=1),
    )
