"""Build the navigation tree of a documentation version.

The builder walks the version directory, fanning out per subdirectory, and
asks a metadata lookup for each entry's title, order and clickability. It
never reads documents itself: during a build the lookup is served from the
documents just processed, at read time from the manifest or an on-demand
computation.

Rules:

* hidden entries and ``main``/``index`` files are skipped (the latter are
  landing pages and feed their directory node);
* a directory node appears only when it has at least one child or a
  clickable landing document;
* a file node always appears, with an ``href`` only when clickable;
* siblings sort by ``order`` (unordered entries last), then by title
  case-insensitively.
"""

from __future__ import annotations

import asyncio
import logging
import typing as typ

from ._constants import DEFAULT_ORDER, LANDING_NAMES
from .errors import ReadFailure
from .models import DocMeta, NavItem
from .slugs import SlugStrategy, is_hidden, strip_doc_extension

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

MetaLookup = typ.Callable[[str, tuple[str, ...]], typ.Awaitable[DocMeta | None]]


class NavigationBuilder:
    """Produce ordered :class:`NavItem` trees for one version at a time."""

    def __init__(
        self,
        content_root: Path,
        lookup: MetaLookup,
        *,
        strategy: SlugStrategy | None = None,
        base_path: str = "/docs",
    ) -> None:
        """Initialize the builder.

        Parameters
        ----------
        content_root : Path
            Directory containing one folder per version.
        lookup : callable
            ``async (version, slug) -> DocMeta | None`` returning metadata
            for the document a slug resolves to.
        strategy : SlugStrategy, optional
            Converts on-disk names into href segments.
        base_path : str, optional
            URL prefix for hrefs.
        """
        self.content_root = content_root
        self.lookup = lookup
        self.strategy = strategy or SlugStrategy()
        self.base_path = base_path

    async def build(self, version: str) -> list[NavItem]:
        """Return the navigation tree for ``version``; ``[]`` when absent."""
        version_dir = self.content_root / version
        if not await asyncio.to_thread(version_dir.is_dir):
            return []
        return await self._build_dir(version, version_dir, ())

    async def _build_dir(
        self, version: str, directory: Path, slug: tuple[str, ...]
    ) -> list[NavItem]:
        names = await asyncio.to_thread(_scan_names, directory)
        nodes = await asyncio.gather(
            *(
                self._build_node(version, directory, slug, name, is_dir)
                for name, is_dir in sorted(names.items())
            )
        )
        items = [node for node in nodes if node is not None]
        return sorted(items, key=_sort_key)

    async def _build_node(
        self,
        version: str,
        directory: Path,
        parent: tuple[str, ...],
        name: str,
        is_dir: bool,
    ) -> NavItem | None:
        slug = (*parent, name)
        meta = await self.lookup(version, slug)
        clickable = meta is not None and meta.clickable
        title = meta.title if meta is not None else name
        order = meta.sort_order if meta is not None else DEFAULT_ORDER
        href = self.strategy.href(self.base_path, version, slug) if clickable else None

        if not is_dir:
            return NavItem(title=title, href=href, order=order)

        try:
            children = await self._build_dir(version, directory / name, slug)
        except ReadFailure as exc:
            logger.warning("Skipping unreadable directory %s: %s", exc.path, exc.reason)
            children = []
        if not children and not clickable:
            return None
        return NavItem(title=title, href=href, children=children, order=order)


def _sort_key(item: NavItem) -> tuple[int, str, str]:
    return (item.order, item.title.casefold(), item.title)


def _scan_names(directory: Path) -> dict[str, bool]:
    """Map visible entry names (extension stripped) to whether a directory exists."""
    try:
        children = list(directory.iterdir())
    except OSError as exc:
        raise ReadFailure(directory, exc.strerror or str(exc)) from exc
    names: dict[str, bool] = {}
    for child in children:
        if is_hidden(child.name):
            continue
        if child.is_dir():
            names[child.name] = True
            continue
        stem = strip_doc_extension(child.name)
        if stem is None or stem in LANDING_NAMES:
            continue
        names.setdefault(stem, False)
    return names


__all__ = ["MetaLookup", "NavigationBuilder"]
