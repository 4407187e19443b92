"""Discover documentation versions under the content root.

Versions are the top-level directories of the content root. They are sorted
by semantic version when every name looks like ``vMAJOR.MINOR.PATCH`` (the
``v`` and the minor/patch parts are optional), and case-insensitively
otherwise.

Example
-------
>>> sort_versions(["v1.10.0", "v1.2.0", "v1.9"])
['v1.2.0', 'v1.9', 'v1.10.0']
>>> sort_versions(["latest", "V2", "beta"])
['beta', 'latest', 'V2']
"""

from __future__ import annotations

import asyncio
import logging
import re
import typing as typ

from .slugs import is_hidden

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

SEMVER_PREFIX = re.compile(r"^[vV]?(\d+)(?:\.(\d+))?(?:\.(\d+))?")


def _semver_key(name: str) -> tuple[int, int, int] | None:
    match = SEMVER_PREFIX.match(name)
    if not match:
        return None
    major, minor, patch = match.groups()
    return (int(major), int(minor or 0), int(patch or 0))


def sort_versions(names: typ.Iterable[str]) -> list[str]:
    """Return ``names`` sorted ascending, semver-aware when all names allow it."""
    items = list(names)
    keys = {name: _semver_key(name) for name in items}
    if items and all(key is not None for key in keys.values()):
        return sorted(items, key=lambda name: (keys[name], name.casefold(), name))
    return sorted(items, key=lambda name: (name.casefold(), name))


class VersionStore:
    """List the version directories of a content root."""

    def __init__(self, content_root: Path) -> None:
        self.content_root = content_root

    async def list_versions(self) -> list[str]:
        """Return visible version directory names, sorted ascending.

        Directory-read errors (missing root, permissions) yield an empty list.
        """
        return await asyncio.to_thread(self._scan)

    def _scan(self) -> list[str]:
        try:
            entries = list(self.content_root.iterdir())
        except OSError as exc:
            logger.debug("Cannot list versions under %s: %s", self.content_root, exc)
            return []
        names = [
            entry.name
            for entry in entries
            if not is_hidden(entry.name) and entry.is_dir()
        ]
        return sort_versions(names)


__all__ = ["SEMVER_PREFIX", "VersionStore", "sort_versions"]
