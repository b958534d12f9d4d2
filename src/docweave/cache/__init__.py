"""Compile caching subsystem.

Key Components:
- `fingerprint`: deterministic cache key over compiler inputs.
- `CompileCache`: the content-addressed store of compiled documents.
- `CacheBackend`: a protocol for implementing custom cache backends.
- `DiskCacheBackend`: a disk-based cache backend implementation.
"""

from docweave.cache.backends import CacheBackend, DiskCacheBackend
from docweave.cache.compile_cache import CompileCache
from docweave.cache.fingerprint import CACHE_FORMAT_VERSION, fingerprint

__all__ = ["CACHE_FORMAT_VERSION", "CacheBackend", "CompileCache", "DiskCacheBackend", "fingerprint"]
