"""Centralized logging configuration for docweave."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Final, cast

from rich.console import Console
from rich.logging import RichHandler

__all__ = ["console", "configure_logging"]

_LOG_LEVEL_ENV: Final[str] = "DOCWEAVE_LOG_LEVEL"
_DEFAULT_LEVEL_NAME: Final[str] = "INFO"

console = Console(stderr=True)

if TYPE_CHECKING:
    class _ManagedRichHandler(RichHandler):
        _docweave_managed: bool
else:
    _ManagedRichHandler = RichHandler


def _resolve_level(override: str | None = None) -> int:
    """Return the logging level from ``override`` or the environment."""

    level_name = (override or os.getenv(_LOG_LEVEL_ENV, _DEFAULT_LEVEL_NAME)).upper()
    return getattr(logging, level_name, logging.INFO)


def configure_logging(level: str | None = None) -> None:
    """Configure logging once with a Rich handler.

    Warnings are captured so that diagnostics such as unresolved components
    show up in the same stream as regular log records.
    """

    root_logger = logging.getLogger()

    managed_handler: _ManagedRichHandler | None = None
    for handler in root_logger.handlers:
        if isinstance(handler, RichHandler) and getattr(handler, "_docweave_managed", False):
            managed_handler = cast(_ManagedRichHandler, handler)
            break

    if managed_handler is None:
        root_logger.handlers.clear()
        handler = _ManagedRichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        handler._docweave_managed = True
        root_logger.addHandler(handler)

    root_logger.setLevel(_resolve_level(level))

    # markdown-it is chatty at debug level
    logging.getLogger("markdown_it").setLevel(logging.WARNING)
    logging.captureWarnings(True)
