"""Walk a version's documents and turn processed output into DocFile records."""

from __future__ import annotations

import asyncio
import dataclasses as dc
import typing as typ
from pathlib import Path

from ._constants import LANDING_NAMES
from .errors import ReadFailure
from .models import DocFile, doc_key
from .slugs import is_hidden, normalize_slug, strip_doc_extension

if typ.TYPE_CHECKING:
    from .pipeline import ProcessedOutput, Processor
    from .resolver import DocumentResolver


@dc.dataclass(frozen=True, slots=True)
class DocumentEntry:
    """A document discovered on disk.

    Attributes
    ----------
    slug : tuple[str, ...]
        Slug segments; a landing page takes its directory's slug.
    path : Path
        Backing file.
    landing : bool
        ``True`` for ``main.md``/``main.mdx`` section landing pages.
    """

    slug: tuple[str, ...]
    path: Path
    landing: bool

    @property
    def priority(self) -> int:
        """Rank matching the resolver's candidate order (lower wins)."""
        mdx = self.path.suffix == ".mdx"
        if self.landing:
            return 2 if mdx else 3
        return 0 if mdx else 1


def entry_for_path(version_dir: Path, path: Path) -> DocumentEntry | None:
    """Classify ``path`` (inside ``version_dir``) as a document entry.

    ``index`` files and non-Markdown files are not documents and yield
    ``None``.
    """
    stem = strip_doc_extension(path.name)
    if stem is None or stem == LANDING_NAMES[1]:
        return None
    parents = path.parent.relative_to(version_dir).parts
    if stem == LANDING_NAMES[0]:
        return DocumentEntry(slug=tuple(parents), path=path, landing=True)
    return DocumentEntry(slug=(*parents, stem), path=path, landing=False)


async def walk_documents(content_root: Path, version: str) -> list[DocumentEntry]:
    """Return every document of ``version``, one entry per slug.

    Subdirectories are walked concurrently. When two files claim the same
    slug (``guides.mdx`` and ``guides/main.mdx``, or ``main.md`` next to
    ``main.mdx``) the one the resolver would pick is kept. Entries are
    returned sorted by slug.
    """
    version_dir = content_root / version
    if not await asyncio.to_thread(version_dir.is_dir):
        return []
    found = await _walk(version_dir, version_dir)
    chosen: dict[tuple[str, ...], DocumentEntry] = {}
    for entry in found:
        current = chosen.get(entry.slug)
        if current is None or entry.priority < current.priority:
            chosen[entry.slug] = entry
    return [chosen[slug] for slug in sorted(chosen)]


async def _walk(version_dir: Path, directory: Path) -> list[DocumentEntry]:
    children = await asyncio.to_thread(_list_dir, directory)
    entries: list[DocumentEntry] = []
    subdirs: list[Path] = []
    for child, is_dir in children:
        if is_dir:
            subdirs.append(child)
            continue
        entry = entry_for_path(version_dir, child)
        if entry is not None:
            entries.append(entry)
    nested = await asyncio.gather(*(_walk(version_dir, sub) for sub in subdirs))
    for group in nested:
        entries.extend(group)
    return entries


def _list_dir(directory: Path) -> list[tuple[Path, bool]]:
    try:
        children = sorted(directory.iterdir(), key=lambda item: item.name)
    except OSError as exc:
        raise ReadFailure(directory, exc.strerror or str(exc)) from exc
    return [(child, child.is_dir()) for child in children if not is_hidden(child.name)]


def _as_order(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def normalize_keywords(value: object) -> list[str]:
    """Return keywords as a list, splitting comma-separated strings.

    >>> normalize_keywords("cache, build ,")
    ['cache', 'build']
    """
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, list | tuple):
        return [str(item).strip() for item in value if str(item).strip()]
    return []


def doc_from_output(
    entry: DocumentEntry,
    *,
    source_path: str,
    raw_source: str,
    output: ProcessedOutput,
    fallback_title: str,
    fingerprint: str = "",
) -> DocFile:
    """Build a :class:`DocFile` from processor output."""
    frontmatter = output.metadata.frontmatter
    title = frontmatter.get("title")
    description = frontmatter.get("description")
    return DocFile(
        slug=entry.slug,
        source_path=source_path,
        title=str(title) if title not in (None, "") else fallback_title,
        description=str(description) if description not in (None, "") else None,
        order=_as_order(frontmatter.get("order")),
        keywords=normalize_keywords(frontmatter.get("keywords")),
        headings=list(output.metadata.toc),
        landing=entry.landing,
        compiled_content=output.compiled,
        raw_source=raw_source,
        plain_text=output.metadata.plain_text,
        fingerprint=fingerprint,
    )


class DocumentLoader:
    """Read, process and assemble documents for both build and read paths."""

    def __init__(
        self, content_root: Path, resolver: DocumentResolver, processor: Processor
    ) -> None:
        self.content_root = content_root
        self.resolver = resolver
        self.processor = processor

    def relative(self, path: Path) -> str:
        """Return ``path`` relative to the content root, as POSIX text."""
        try:
            return path.relative_to(self.content_root).as_posix()
        except ValueError:
            return path.as_posix()

    async def read(self, path: Path) -> bytes:
        """Return the raw bytes of ``path``.

        Raises
        ------
        ReadFailure
            If the file cannot be read.
        """
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise ReadFailure(path, exc.strerror or str(exc)) from exc

    async def load_entry(
        self, version: str, entry: DocumentEntry, data: bytes | None = None
    ) -> DocFile:
        """Process ``entry`` into a :class:`DocFile`, reading it unless given."""
        if data is None:
            data = await self.read(entry.path)
        try:
            source = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ReadFailure(entry.path, f"not valid UTF-8 ({exc.reason})") from exc
        output = await self.processor.process(source, doc_key(version, entry.slug))
        return doc_from_output(
            entry,
            source_path=self.relative(entry.path),
            raw_source=source,
            output=output,
            fallback_title=entry.slug[-1] if entry.slug else version,
            fingerprint=self.processor.fingerprint,
        )

    async def locate(
        self, version: str, slug: typ.Sequence[str]
    ) -> DocumentEntry | None:
        """Resolve ``slug`` to the on-disk entry that backs it."""
        path = await self.resolver.resolve(version, normalize_slug(slug))
        if path is None:
            return None
        return entry_for_path(self.content_root / version, path)

    async def load(self, version: str, slug: typ.Sequence[str]) -> DocFile | None:
        """Resolve and process a document; ``None`` when it does not exist."""
        entry = await self.locate(version, slug)
        if entry is None:
            return None
        return await self.load_entry(version, entry)


__all__ = [
    "DocumentEntry",
    "DocumentLoader",
    "doc_from_output",
    "entry_for_path",
    "normalize_keywords",
    "walk_documents",
]
