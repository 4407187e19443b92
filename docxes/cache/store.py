"""Content-addressable cache of processed document output.

Each entry lives in its own file named by the SHA-256 digest of its
composite key, so keys never produce invalid filenames and concurrent writes
to different keys never touch the same file. There is no eviction; ``clean``
wipes the whole directory.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import shutil
import typing as typ

import msgspec

from ._io import encode_json, read_optional, write_atomic

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

T = typ.TypeVar("T")


class ContentStore(typ.Generic[T]):
    """Persist ``key -> record`` blobs decoded back into ``record_type``."""

    def __init__(self, directory: Path, record_type: type[T]) -> None:
        self.directory = directory
        self.record_type = record_type

    def path_for(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.directory / f"{digest}.json"

    async def get(self, key: str) -> T | None:
        """Return the cached record for ``key``; unreadable blobs are misses."""
        return await asyncio.to_thread(self._read, key)

    async def set(self, key: str, value: T) -> None:
        """Store ``value`` under ``key``, replacing any previous blob."""
        await asyncio.to_thread(write_atomic, self.path_for(key), encode_json(value))

    def clean(self) -> None:
        """Delete every cached blob."""
        shutil.rmtree(self.directory, ignore_errors=True)

    def _read(self, key: str) -> T | None:
        path = self.path_for(key)
        try:
            payload = read_optional(path)
        except OSError as exc:
            logger.debug("Treating unreadable cache blob %s as a miss: %s", path, exc)
            return None
        if payload is None:
            return None
        try:
            return msgspec.json.decode(payload, type=self.record_type)
        except msgspec.DecodeError:
            logger.debug("Treating corrupt cache blob %s as a miss", path)
            return None


__all__ = ["ContentStore"]
