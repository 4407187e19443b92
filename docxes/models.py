"""Typed records persisted by the docxes build and read back at serve time.

Everything in this module is a :class:`msgspec.Struct` so the manifest,
per-document artifacts, and the public search snapshot can be encoded and
decoded (with validation) without hand-written serializers. Optional fields
are omitted from JSON when unset, which keeps the search snapshot limited to
the fields a caller asked for.

Example
-------
>>> from docxes.models import NavItem
>>> NavItem(title="Intro", href="/docs/v1/intro", order=1).clickable
True
"""

from __future__ import annotations

import typing as typ

import msgspec

from ._constants import DEFAULT_ORDER


class Heading(msgspec.Struct, frozen=True):
    """A single table-of-contents entry extracted from document content."""

    id: str
    title: str
    depth: int


class DocMeta(msgspec.Struct, omit_defaults=True, kw_only=True):
    """Document metadata stored in the manifest (compiled content excluded).

    Attributes
    ----------
    slug : tuple[str, ...]
        Path segments identifying the document within its version.
    source_path : str
        POSIX path of the backing file, relative to the content root.
    title : str
        Frontmatter title, falling back to the last slug segment.
    clickable : bool
        ``True`` when the document body has non-empty plain text.
    landing : bool
        ``True`` for ``main``/``index`` section landing pages.
    """

    slug: tuple[str, ...]
    source_path: str
    title: str
    description: str | None = None
    order: int | None = None
    keywords: list[str] = msgspec.field(default_factory=list)
    headings: list[Heading] = msgspec.field(default_factory=list)
    clickable: bool = False
    landing: bool = False

    @property
    def sort_order(self) -> int:
        """Return the explicit order or the unordered sentinel."""
        return DEFAULT_ORDER if self.order is None else self.order


class DocFile(msgspec.Struct, omit_defaults=True, kw_only=True):
    """A fully processed document, as persisted under ``data/<version>/``.

    ``fingerprint`` records the processor configuration that produced the
    artifact; an artifact with a different fingerprint is stale even when
    its source is unchanged.
    """

    slug: tuple[str, ...]
    source_path: str
    title: str
    description: str | None = None
    order: int | None = None
    keywords: list[str] = msgspec.field(default_factory=list)
    headings: list[Heading] = msgspec.field(default_factory=list)
    landing: bool = False
    compiled_content: str = ""
    raw_source: str = ""
    plain_text: str = ""
    fingerprint: str = ""

    @property
    def clickable(self) -> bool:
        """Return whether the document has a navigable body."""
        return bool(self.plain_text)

    def meta(self) -> DocMeta:
        """Return the manifest-sized view of this document."""
        return DocMeta(
            slug=self.slug,
            source_path=self.source_path,
            title=self.title,
            description=self.description,
            order=self.order,
            keywords=list(self.keywords),
            headings=list(self.headings),
            clickable=self.clickable,
            landing=self.landing,
        )


class NavItem(msgspec.Struct, omit_defaults=True, kw_only=True):
    """A navigation tree node; ``href`` is absent for non-clickable groups."""

    title: str
    href: str | None = None
    children: list[NavItem] | None = None
    order: int = DEFAULT_ORDER

    @property
    def clickable(self) -> bool:
        """Return ``True`` when the node links to a page."""
        return self.href is not None


class SearchRecord(msgspec.Struct, omit_defaults=True, kw_only=True):
    """One flattened search-index entry keyed by ``"<version>-<slugPath>"``."""

    id: str
    version: str
    href: str
    title: str | None = None
    description: str | None = None
    keywords: list[str] | None = None
    content: str | None = None


class VersionMeta(msgspec.Struct, omit_defaults=True, kw_only=True):
    """Title/description of a version, taken from its landing document."""

    title: str | None = None
    description: str | None = None


class Manifest(msgspec.Struct, kw_only=True):
    """Single persisted snapshot of all derived build state."""

    versions: list[str]
    version_metadata: dict[str, VersionMeta]
    navigation: dict[str, list[NavItem]]
    docs: dict[str, DocMeta]
    search_index: list[SearchRecord]
    generated_at: str


def doc_key(version: str, slug: typ.Sequence[str]) -> str:
    """Return the ``"<version>/<slug>"`` key used across caches and manifests."""
    return "/".join([version, *slug])


__all__ = [
    "DocFile",
    "DocMeta",
    "Heading",
    "Manifest",
    "NavItem",
    "SearchRecord",
    "VersionMeta",
    "doc_key",
]
