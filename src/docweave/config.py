"""Site configuration loaded from ``.docweave.toml`` and the environment."""

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from docweave.exceptions import ConfigLoadError

CONFIG_FILENAME = ".docweave.toml"


def _deep_merge(destination: dict[str, Any], source: dict[str, Any]) -> dict[str, Any]:
    """Merge source into destination, with source values overwriting."""
    for key, value in source.items():
        if isinstance(value, Mapping) and key in destination and isinstance(destination[key], Mapping):
            destination[key] = _deep_merge(dict(destination[key]), dict(value))
        else:
            destination[key] = value
    return destination


class PathsSettings(BaseModel):
    """Path configuration.

    All paths are relative to ``site_root`` unless absolute.
    """

    site_root: Path = Field(default_factory=Path.cwd, description="Root directory of the site")

    content_dir: Path = Field(default=Path("content"), description="Markdown documents")
    output_dir: Path = Field(default=Path("build"), description="Generated page payloads")
    cache_dir: Path = Field(default=Path(".docweave/cache"), description="Compiled document cache")
    lockfile: Path = Field(
        default=Path("uv.lock"),
        description="Dependency lockfile; its contents are part of every cache key",
    )

    @property
    def abs_content_dir(self) -> Path:
        return self._resolve(self.content_dir)

    @property
    def abs_output_dir(self) -> Path:
        return self._resolve(self.output_dir)

    @property
    def abs_cache_dir(self) -> Path:
        return self._resolve(self.cache_dir)

    @property
    def abs_lockfile(self) -> Path:
        return self._resolve(self.lockfile)

    def _resolve(self, path: Path) -> Path:
        if path.is_absolute():
            return path
        return self.site_root / path


class BuildSettings(BaseModel):
    """Build behaviour."""

    workers: int = Field(default=4, ge=1, description="Documents compiled in parallel")
    extensions: list[str] = Field(default_factory=lambda: [".md"], description="Document file suffixes")
    index_toc: bool = Field(default=False, description="Emit a table of contents for the site index")


class DocweaveConfig(BaseSettings):
    """Root configuration.

    Supports environment variable overrides with the pattern
    DOCWEAVE_SECTION__KEY (e.g., DOCWEAVE_BUILD__WORKERS).
    """

    paths: PathsSettings = Field(default_factory=PathsSettings)
    build: BuildSettings = Field(default_factory=BuildSettings)

    model_config = SettingsConfigDict(
        extra="ignore",
        env_prefix="DOCWEAVE_",
        env_nested_delimiter="__",
    )

    @classmethod
    def load(cls, site_root: Path | None = None) -> "DocweaveConfig":
        """Load configuration from ``.docweave.toml`` and environment variables.

        Priority (highest to lowest):
        1. Environment variables (DOCWEAVE_SECTION__KEY)
        2. Config file (.docweave.toml)
        3. Defaults
        """
        root_path = (site_root if site_root is not None else Path.cwd()).resolve()
        config_file = root_path / CONFIG_FILENAME

        file_settings: dict[str, Any] = {}
        if config_file.is_file():
            try:
                with config_file.open("rb") as f:
                    file_settings = tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as exc:
                raise ConfigLoadError(str(config_file), str(exc)) from exc

        env_settings = cls().model_dump(exclude_unset=True)
        merged_config = _deep_merge(file_settings, env_settings)
        merged_config.setdefault("paths", {})["site_root"] = root_path

        return cls.model_validate(merged_config)
