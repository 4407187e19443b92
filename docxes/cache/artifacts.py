"""Per-document artifacts stored under ``<cache-root>/data/<version>/``.

Each artifact is a plain JSON :class:`~docxes.models.DocFile` record
(metadata plus compiled content), so a document can be served or reused by an
incremental build without re-running the pipeline and without the manifest.
"""

from __future__ import annotations

import asyncio
import logging
import typing as typ

import msgspec

from ..models import DocFile
from ._io import encode_json, read_optional, write_atomic

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class ArtifactStore:
    """Load and save one :class:`DocFile` per ``(version, slug)`` slot."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = data_dir

    def path_for(self, version: str, slug: typ.Sequence[str]) -> Path:
        """Return ``data/<version>/<slug...>.json``; a version landing page
        maps to ``data/<version>.json``."""
        if not slug:
            return self.data_dir / f"{version}.json"
        *dirs, name = slug
        return self.data_dir.joinpath(version, *dirs, f"{name}.json")

    async def load(self, version: str, slug: typ.Sequence[str]) -> DocFile | None:
        """Return the stored artifact, or ``None`` when missing or corrupt."""
        return await asyncio.to_thread(self._read, self.path_for(version, slug))

    async def save(self, version: str, slug: typ.Sequence[str], doc: DocFile) -> None:
        path = self.path_for(version, slug)
        await asyncio.to_thread(write_atomic, path, encode_json(doc))

    @staticmethod
    def _read(path: Path) -> DocFile | None:
        try:
            payload = read_optional(path)
        except OSError as exc:
            logger.debug("Cannot read artifact %s: %s", path, exc)
            return None
        if payload is None:
            return None
        try:
            return msgspec.json.decode(payload, type=DocFile)
        except msgspec.DecodeError:
            logger.debug("Ignoring corrupt artifact %s", path)
            return None


__all__ = ["ArtifactStore"]
