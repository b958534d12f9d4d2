"""Deterministic fingerprints of compiler inputs."""

import hashlib
import json
from collections.abc import Sequence

# Bump to invalidate every compiled document on disk.
CACHE_FORMAT_VERSION = 1


def fingerprint(
    body: str,
    component_names: Sequence[str],
    lockfile: str,
    version: int | str = CACHE_FORMAT_VERSION,
) -> str:
    """Generate the SHA256 cache key for one compile request.

    ``component_names`` is hashed as an ordered list: the directives the
    compiler synthesizes follow that order, so reordering changes the output.
    """
    payload = json.dumps(
        {
            "body": body,
            "components": list(component_names),
            "lockfile": lockfile,
            "version": version,
        },
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
    )
    hash_obj = hashlib.sha256(payload.encode("utf-8"))
    return f"sha256:{hash_obj.hexdigest()}"
