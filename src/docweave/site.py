"""Site build driver: content store in, one JSON page payload per document out.

Build side (per document, in parallel)::

    read_document -> CachedCompiler.compile -> execute -> prepare_tree -> serialize

Consuming side::

    load_payload -> deserialize -> render_html (inside the page template)

A failing document never stops the others; it is reported and its page is
not published.
"""

from __future__ import annotations

import functools
import json
import logging
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from jinja2 import Environment, PackageLoader, select_autoescape

from docweave.cache import CompileCache
from docweave.compiler import DEFAULT_PLUGINS, CachedCompiler, read_lockfile
from docweave.compiler.plugins import MarkdownPlugin
from docweave.components import REGISTRY, component_names
from docweave.config import DocweaveConfig
from docweave.content import Document, enumerate_paths, read_document
from docweave.exceptions import DocweaveError, PayloadError
from docweave.postprocess import prepare_tree
from docweave.runtime import deserialize, execute, render_html, serialize

logger = logging.getLogger(__name__)

PAYLOAD_FILENAME = "page.json"


@dataclass(frozen=True, slots=True)
class PagePayload:
    """Transport payload of one rendered page."""

    content: str
    toc: str
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PagePayload:
        return cls(content=data["content"], toc=data["toc"], meta=dict(data.get("meta") or {}))


@dataclass(frozen=True, slots=True)
class BuildFailure:
    path: str
    error: DocweaveError


@dataclass(slots=True)
class BuildReport:
    """Outcome of a site build."""

    built: list[str] = field(default_factory=list)
    failed: list[BuildFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def build_page(
    document: Document,
    compiler: CachedCompiler,
    names: Sequence[str],
    *,
    index_toc: bool = False,
) -> PagePayload:
    """Compile, execute and serialize one document."""
    code = compiler.compile(document.body, names, path=document.path)
    tree = execute(code, names, path=document.path)
    toc, children = prepare_tree(tree)
    if document.is_index and not index_toc:
        toc = []
    return PagePayload(content=serialize(children), toc=serialize(toc), meta=document.meta)


def payload_file(output_dir: Path, segments: Sequence[str]) -> Path:
    return output_dir.joinpath(*(segments or ("index",)), PAYLOAD_FILENAME)


def write_payload(path: Path, payload: PagePayload) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".json.tmp")
    tmp.write_text(json.dumps(payload.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
    tmp.replace(path)


def load_payload(path: Path) -> PagePayload:
    """Read a payload written by :func:`write_payload`.

    Raises:
        PayloadError: If the file is not a JSON object with string ``content`` and ``toc``.

    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise PayloadError(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise PayloadError(str(path), f"expected an object, got {type(data).__name__}")
    for name in ("content", "toc"):
        if not isinstance(data.get(name), str):
            raise PayloadError(str(path), f"'{name}' must be serialized JSON text")
    if not isinstance(data.get("meta") or {}, dict):
        raise PayloadError(str(path), "'meta' must be an object")
    return PagePayload.from_dict(data)


class SiteBuilder:
    """Builds every document of a site.

    The compile cache is opened for the duration of :meth:`build` and closed
    afterwards unless the caller passed in an already-open cache.
    """

    def __init__(
        self,
        config: DocweaveConfig,
        *,
        cache: CompileCache | None = None,
        names: Sequence[str] | None = None,
        plugins: Sequence[MarkdownPlugin] = DEFAULT_PLUGINS,
    ) -> None:
        self.config = config
        self.cache = cache if cache is not None else CompileCache(config.paths.abs_cache_dir)
        self.names = list(names) if names is not None else component_names()
        self.plugins = tuple(plugins)
        self.compiler = CachedCompiler(
            self.cache,
            lockfile=read_lockfile(config.paths.abs_lockfile),
            plugins=self.plugins,
        )

    @property
    def content_dir(self) -> Path:
        return self.config.paths.abs_content_dir

    @property
    def output_dir(self) -> Path:
        return self.config.paths.abs_output_dir

    def paths(self) -> list[tuple[str, ...]]:
        return enumerate_paths(self.content_dir, self.config.build.extensions)

    def build_one(self, segments: Sequence[str]) -> PagePayload:
        """Build the payload of one document without writing it."""
        document = read_document(self.content_dir, segments, self.config.build.extensions)
        return build_page(document, self.compiler, self.names, index_toc=self.config.build.index_toc)

    def _publish(self, segments: tuple[str, ...]) -> None:
        target = payload_file(self.output_dir, segments)
        try:
            payload = self.build_one(segments)
        except DocweaveError:
            target.unlink(missing_ok=True)
            raise
        write_payload(target, payload)

    def build(self, paths: Sequence[tuple[str, ...]] | None = None) -> BuildReport:
        """Build ``paths`` (default: every document) and write their payloads."""
        targets = list(paths) if paths is not None else self.paths()
        report = BuildReport()
        owns_cache = not self.cache.is_open
        self.cache.open()
        try:
            with ThreadPoolExecutor(max_workers=self.config.build.workers) as pool:
                futures = {pool.submit(self._publish, segments): segments for segments in targets}
                for future in as_completed(futures):
                    path = "/".join(futures[future])
                    try:
                        future.result()
                    except DocweaveError as e:
                        logger.error("Failed to build /%s: %s", path, e)
                        report.failed.append(BuildFailure(path=path, error=e))
                    else:
                        report.built.append(path)
        finally:
            if owns_cache:
                self.cache.close()

        report.built.sort()
        report.failed.sort(key=lambda failure: failure.path)
        logger.info("Built %d page(s), %d failed", len(report.built), len(report.failed))
        return report


def build_site(config: DocweaveConfig, **kwargs: Any) -> BuildReport:
    """Build every document described by ``config``."""
    return SiteBuilder(config, **kwargs).build()


@functools.lru_cache(maxsize=1)
def _environment() -> Environment:
    return Environment(
        loader=PackageLoader("docweave", "templates"),
        autoescape=select_autoescape(["html", "jinja"]),
        keep_trailing_newline=True,
    )


def render_page(
    payload: PagePayload,
    registry: Mapping[str, Callable[..., Any]] | None = None,
) -> str:
    """Deserialize a payload and render the full HTML page.

    Raises:
        PayloadError: If ``content`` or ``toc`` is not a renderable serialized tree.

    """
    components = REGISTRY if registry is None else registry
    label = str(payload.meta.get("title", "<payload>"))
    try:
        toc = deserialize(payload.toc, components)
        if not isinstance(toc, list):
            raise PayloadError(label, "table of contents must be a list")
        entries = [
            {"url": entry.get("url", ""), "depth": entry.get("depth", 2), "html": render_html(entry.get("text"))}
            for entry in toc
            if isinstance(entry, dict)
        ]
        content = render_html(deserialize(payload.content, components))
    except (json.JSONDecodeError, TypeError) as e:
        raise PayloadError(label, str(e)) from e
    template = _environment().get_template("page.html.jinja")
    return template.render(meta=payload.meta, toc=entries, content=content)
