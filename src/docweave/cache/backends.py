"""Low-level cache backend protocols and implementations."""

from __future__ import annotations

import contextlib
import pickle
import sqlite3
from typing import TYPE_CHECKING, Any, Protocol

import diskcache

from docweave.exceptions import CacheIOError

if TYPE_CHECKING:
    from pathlib import Path

# Everything diskcache may raise for an unreadable or unwritable entry.
STORAGE_ERRORS: tuple[type[BaseException], ...] = (
    OSError,
    sqlite3.Error,
    diskcache.Timeout,
    pickle.UnpicklingError,
    EOFError,
    ValueError,
)


class CacheBackend(Protocol):
    """Abstract protocol for cache backends."""

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...

    def clear(self) -> int: ...

    def close(self) -> None: ...


class DiskCacheBackend:
    """Adapter for diskcache.Cache to match the CacheBackend protocol.

    Storage failures surface as :class:`CacheIOError`; a missing key returns
    ``None``.
    """

    def __init__(self, directory: Path, **kwargs: Any) -> None:
        self.directory = directory
        try:
            self._cache = diskcache.Cache(str(directory), **kwargs)
        except STORAGE_ERRORS as e:
            raise CacheIOError("*", f"cannot open cache at {directory}: {e}") from e

    def get(self, key: str) -> Any:
        try:
            return self._cache.get(key, default=None, retry=True)
        except STORAGE_ERRORS as e:
            raise CacheIOError(key, str(e)) from e

    def set(self, key: str, value: Any) -> None:
        try:
            self._cache.set(key, value, retry=True)
        except STORAGE_ERRORS as e:
            raise CacheIOError(key, str(e)) from e

    def delete(self, key: str) -> None:
        with contextlib.suppress(KeyError):
            del self._cache[key]

    def clear(self) -> int:
        return self._cache.clear(retry=True)

    def close(self) -> None:
        self._cache.close()
