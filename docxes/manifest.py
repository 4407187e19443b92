"""Persist the build manifest under ``<cache-root>/manifest.json``.

The manifest is the single snapshot a read-path process consults instead of
walking the content tree. A missing manifest is normal before the first
build; an unreadable or corrupt one is reported and treated the same way so
callers fall back to on-demand computation.
"""

from __future__ import annotations

import asyncio
import datetime as dt
import logging
import typing as typ

import msgspec

from .cache._io import encode_json, read_optional, write_atomic
from .models import Manifest

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


def timestamp(now: dt.datetime | None = None) -> str:
    """Return an ISO-8601 UTC timestamp for ``generated_at``."""
    moment = now or dt.datetime.now(dt.UTC)
    return moment.astimezone(dt.UTC).isoformat().replace("+00:00", "Z")


class ManifestStore:
    """Load and save :class:`~docxes.models.Manifest` snapshots."""

    def __init__(self, path: Path) -> None:
        self.path = path

    async def load(self) -> Manifest | None:
        """Return the stored manifest or ``None`` when absent or unusable."""
        return await asyncio.to_thread(self._read)

    async def save(self, manifest: Manifest) -> Path:
        """Write ``manifest`` atomically and return its path."""
        await asyncio.to_thread(write_atomic, self.path, encode_json(manifest))
        return self.path

    def _read(self) -> Manifest | None:
        try:
            payload = read_optional(self.path)
        except OSError as exc:
            logger.warning("Cannot read manifest at %s: %s", self.path, exc)
            return None
        if payload is None:
            return None
        try:
            return msgspec.json.decode(payload, type=Manifest)
        except msgspec.ValidationError as exc:
            logger.warning("Ignoring invalid manifest at %s: %s", self.path, exc)
            return None
        except msgspec.DecodeError:
            logger.warning("Ignoring corrupt manifest at %s", self.path)
            return None


__all__ = ["ManifestStore", "timestamp"]
