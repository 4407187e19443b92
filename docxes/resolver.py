"""Map ``(version, slug)`` pairs onto backing Markdown/MDX files.

A slug ``[...dirs, name]`` is tried against four candidates in a fixed
priority order, so a document may be either a leaf file or a directory with a
``main`` landing page, and the leaf file wins when both exist:

1. ``dirs/name.mdx``
2. ``dirs/name.md``
3. ``dirs/name/main.mdx``
4. ``dirs/name/main.md``

Example
-------
>>> import asyncio
>>> from pathlib import Path
>>> resolver = DocumentResolver(Path("content/docs"))
>>> asyncio.run(resolver.resolve("v1", ["intro"]))  # doctest: +SKIP
PosixPath('content/docs/v1/intro.mdx')
"""

from __future__ import annotations

import asyncio
import typing as typ

from .slugs import SlugStrategy, is_hidden, normalize_slug, strip_doc_extension

if typ.TYPE_CHECKING:
    from pathlib import Path

LANDING_FILES = ("main.mdx", "main.md")


def candidate_paths(directory: Path, name: str) -> list[Path]:
    """Return the four candidate files for ``name`` inside ``directory``."""
    return [
        directory / f"{name}.mdx",
        directory / f"{name}.md",
        directory / name / LANDING_FILES[0],
        directory / name / LANDING_FILES[1],
    ]


class DocumentResolver:
    """Locate the file backing a document slug within a version."""

    def __init__(
        self, content_root: Path, strategy: SlugStrategy | None = None
    ) -> None:
        self.content_root = content_root
        self.strategy = strategy or SlugStrategy()

    async def resolve(self, version: str, slug: typ.Sequence[str]) -> Path | None:
        """Return the backing file for ``slug`` or ``None`` when absent.

        An empty slug resolves the version's own landing page. Segments that
        do not exist verbatim are matched against on-disk names through the
        slug strategy, so hrefs built from slugified names resolve too.
        """
        return await asyncio.to_thread(self._resolve, version, normalize_slug(slug))

    def _resolve(self, version: str, slug: tuple[str, ...]) -> Path | None:
        if _unsafe(version) or any(_unsafe(segment) for segment in slug):
            return None
        current = self.content_root / version
        if not current.is_dir():
            return None
        if not slug:
            return _first_file(current / name for name in LANDING_FILES)

        *dirs, name = slug
        for segment in dirs:
            located = self._child_directory(current, segment)
            if located is None:
                return None
            current = located

        found = _first_file(candidate_paths(current, name))
        if found is not None:
            return found
        for alias in self._aliases(current, name):
            found = _first_file(candidate_paths(current, alias))
            if found is not None:
                return found
        return None

    def _child_directory(self, parent: Path, segment: str) -> Path | None:
        exact = parent / segment
        if exact.is_dir():
            return exact
        for entry in _sorted_entries(parent):
            if entry.is_dir() and self.strategy.matches(entry.name, segment):
                return entry
        return None

    def _aliases(self, directory: Path, segment: str) -> list[str]:
        """Return on-disk names (other than ``segment``) that map to ``segment``."""
        names: list[str] = []
        for entry in _sorted_entries(directory):
            name = entry.name if entry.is_dir() else strip_doc_extension(entry.name)
            if not name or name == segment or name in names:
                continue
            if self.strategy.matches(name, segment):
                names.append(name)
        return names


def _unsafe(segment: str) -> bool:
    return segment in {".", ".."} or is_hidden(segment)


def _first_file(paths: typ.Iterable[Path]) -> Path | None:
    for path in paths:
        if path.is_file():
            return path
    return None


def _sorted_entries(directory: Path) -> list[Path]:
    try:
        entries = [entry for entry in directory.iterdir() if not is_hidden(entry.name)]
    except OSError:
        return []
    return sorted(entries, key=lambda entry: entry.name)


__all__ = ["LANDING_FILES", "DocumentResolver", "candidate_paths"]
