"""Track content digests of source files between builds."""

from __future__ import annotations

import asyncio
import hashlib
import logging
import typing as typ

import msgspec

from ..errors import ReadFailure
from ._io import encode_json, read_optional, write_atomic

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


def content_digest(data: bytes) -> str:
    """Return the hex SHA-256 digest of ``data``."""
    return hashlib.sha256(data).hexdigest()


class HashTracker:
    """Persisted ``path -> digest`` map used to skip unchanged files.

    Paths are stored relative to the content root so the map stays valid when
    the build runs from a different working directory.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.hashes: dict[str, str] = {}

    async def load(self) -> None:
        """Load the stored map; a missing or corrupt file starts fresh."""
        self.hashes = await asyncio.to_thread(self._read)

    async def save(self) -> None:
        await asyncio.to_thread(write_atomic, self.path, encode_json(self.hashes))

    @staticmethod
    async def digest(path: Path) -> str:
        """Return the digest of the file at ``path``.

        Raises
        ------
        ReadFailure
            If the file cannot be read.
        """
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise ReadFailure(path, exc.strerror or str(exc)) from exc
        return await asyncio.to_thread(content_digest, data)

    def has_changed(self, key: str, digest: str) -> bool:
        """Return ``True`` when no digest is stored for ``key`` or it differs."""
        stored = self.hashes.get(key)
        return stored is None or stored != digest

    def update(self, key: str, digest: str) -> None:
        self.hashes[key] = digest

    def remove(self, key: str) -> None:
        self.hashes.pop(key, None)

    def stored(self, key: str) -> str | None:
        return self.hashes.get(key)

    def _read(self) -> dict[str, str]:
        try:
            payload = read_optional(self.path)
        except OSError as exc:
            logger.warning("Cannot read file hashes at %s: %s", self.path, exc)
            return {}
        if payload is None:
            return {}
        try:
            return msgspec.json.decode(payload, type=dict[str, str])
        except msgspec.DecodeError:
            logger.warning("Ignoring corrupt file hashes at %s", self.path)
            return {}


__all__ = ["HashTracker", "content_digest"]
