"""Command line interface."""

from __future__ import annotations

import json
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from docweave.cache import CompileCache
from docweave.config import DocweaveConfig
from docweave.exceptions import (
    CompileError,
    ConfigLoadError,
    ContentNotFoundError,
    DocweaveError,
    ExecutionError,
    PayloadError,
)
from docweave.logging_setup import configure_logging
from docweave.site import SiteBuilder, load_payload, render_page

app = typer.Typer(name="docweave", help="Compile Markdown documentation into portable component trees.")
cache_app = typer.Typer(name="cache", help="Manage the compiled document cache.")
app.add_typer(cache_app)

console = Console()

SiteRoot = Annotated[Path, typer.Option("--site-root", "-C", help="Site root containing .docweave.toml.")]
Debug = Annotated[bool, typer.Option("--debug", help="Show full tracebacks.")]


@contextmanager
def handle_cli_errors(*, debug: bool = False) -> Generator[None, None, None]:
    """Context manager to handle CLI errors gracefully.

    Args:
        debug: If True, print full traceback. If False, print user-friendly error.

    """
    try:
        yield
    except (KeyboardInterrupt, SystemExit):
        raise
    except ConfigLoadError as e:
        if debug:
            raise
        console.print(f"[bold red]Configuration error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except ContentNotFoundError as e:
        if debug:
            raise
        console.print(f"[bold red]Not found:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except (CompileError, ExecutionError) as e:
        if debug:
            raise
        console.print(f"[bold red]Build error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except PayloadError as e:
        if debug:
            raise
        console.print(f"[bold red]Invalid payload:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except DocweaveError as e:
        if debug:
            raise
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e


def _segments(path: str) -> tuple[str, ...]:
    return tuple(segment for segment in path.strip("/").split("/") if segment)


@app.callback()
def main(
    log_level: Annotated[str | None, typer.Option("--log-level", help="Override DOCWEAVE_LOG_LEVEL.")] = None,
) -> None:
    configure_logging(log_level)


@app.command()
def build(
    site_root: SiteRoot = Path("."),
    workers: Annotated[int | None, typer.Option("--workers", "-j", min=1, help="Parallel documents.")] = None,
    debug: Debug = False,
) -> None:
    """Build a page payload for every document."""
    with handle_cli_errors(debug=debug):
        config = DocweaveConfig.load(site_root)
        if workers is not None:
            config.build.workers = workers
        report = SiteBuilder(config).build()

    console.print(f"[green]Built {len(report.built)} page(s)[/green] into {config.paths.abs_output_dir}")
    if not report.ok:
        table = Table("Document", "Error", title="Failed documents")
        for failure in report.failed:
            table.add_row(escape(f"/{failure.path}"), escape(str(failure.error)))
        console.print(table)
        raise typer.Exit(1)


@app.command()
def paths(site_root: SiteRoot = Path("."), debug: Debug = False) -> None:
    """List the logical path of every document."""
    with handle_cli_errors(debug=debug):
        config = DocweaveConfig.load(site_root)
        for segments in SiteBuilder(config).paths():
            console.print("/" + "/".join(segments))


@app.command()
def show(
    path: Annotated[str, typer.Argument(help="Logical document path, e.g. learn/thinking.")],
    site_root: SiteRoot = Path("."),
    debug: Debug = False,
) -> None:
    """Build one document and print its payload."""
    with handle_cli_errors(debug=debug):
        config = DocweaveConfig.load(site_root)
        builder = SiteBuilder(config)
        with builder.cache:
            payload = builder.build_one(_segments(path))
    console.print_json(json.dumps(payload.to_dict(), ensure_ascii=False))


@app.command()
def render(
    payload_path: Annotated[Path, typer.Argument(help="page.json written by 'docweave build'.", exists=True)],
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Write HTML here.")] = None,
    debug: Debug = False,
) -> None:
    """Render a page payload to HTML with the default components."""
    with handle_cli_errors(debug=debug):
        html = render_page(load_payload(payload_path))
    if output is None:
        typer.echo(html)
    else:
        output.write_text(html, encoding="utf-8")
        console.print(f"Wrote {output}")


@cache_app.command("clear")
def cache_clear(site_root: SiteRoot = Path("."), debug: Debug = False) -> None:
    """Drop every compiled document."""
    with handle_cli_errors(debug=debug):
        config = DocweaveConfig.load(site_root)
        with CompileCache(config.paths.abs_cache_dir) as cache:
            removed = cache.clear()
    console.print(f"Removed {removed} cached document(s)")
