"""Persistent, content-addressed cache of compiled documents."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Self

from docweave.cache.backends import CacheBackend, DiskCacheBackend
from docweave.exceptions import CacheIOError

if TYPE_CHECKING:
    from pathlib import Path
    from types import TracebackType

logger = logging.getLogger(__name__)


class CompileCache:
    """Map fingerprints to compiled units.

    The cache is never load-bearing: read failures count as misses and write
    failures are logged and dropped, so a broken cache only costs recompiles.
    Writes for the same fingerprint always carry identical content, so
    concurrent writers need no coordination.
    """

    def __init__(self, directory: Path | None = None, *, backend: CacheBackend | None = None) -> None:
        if directory is None and backend is None:
            msg = "CompileCache needs a directory or a backend"
            raise ValueError(msg)
        self.directory = directory
        self._backend = backend

    def open(self) -> Self:
        """Open the underlying store. Opening twice is a no-op."""
        if self._backend is None and self.directory is not None:
            self.directory = self.directory.expanduser().resolve()
            try:
                self.directory.mkdir(parents=True, exist_ok=True)
                self._backend = DiskCacheBackend(self.directory)
            except (OSError, CacheIOError) as e:
                logger.warning("Compile cache unavailable at %s, compiling without it: %s", self.directory, e)
                return self
            logger.debug("Opened compile cache at %s", self.directory)
        return self

    @property
    def is_open(self) -> bool:
        return self._backend is not None

    def get(self, key: str) -> str | None:
        """Return the compiled unit stored under ``key``, or ``None`` on a miss."""
        if self._backend is None:
            return None
        try:
            value = self._backend.get(key)
        except CacheIOError as e:
            logger.warning("Ignoring unreadable cache entry: %s", e)
            return None
        if value is None:
            return None
        if not isinstance(value, str):
            logger.warning("Unexpected cache payload type %s for key %s; clearing entry", type(value).__name__, key)
            self._backend.delete(key)
            return None
        return value

    def set(self, key: str, code: str) -> None:
        """Persist a compiled unit."""
        if self._backend is None:
            return
        try:
            self._backend.set(key, code)
        except CacheIOError as e:
            logger.warning("Failed to write compile cache: %s", e)

    def clear(self) -> int:
        """Remove every entry and return how many were dropped."""
        if self._backend is None:
            return 0
        return self._backend.clear()

    def close(self) -> None:
        """Flush and release the underlying store."""
        if self._backend is not None:
            self._backend.close()
            self._backend = None

    def __enter__(self) -> Self:
        return self.open()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
