"""Flatten documents into search-index records and filter them.

Ranking and fuzzy matching are left to whatever consumes
``public/search-index.json``; :func:`filter_records` is a plain
case-insensitive substring filter for callers that need a quick answer.

Example
-------
>>> from docxes.models import SearchRecord
>>> records = [SearchRecord(id="v1-intro", version="v1", href="/docs/v1/intro",
...                         title="Intro", content="Hello world")]
>>> [record.id for record in filter_records(records, "WORLD")]
['v1-intro']
"""

from __future__ import annotations

import typing as typ

from .models import DocMeta, SearchRecord
from .slugs import SlugStrategy

SEARCH_FIELDS = frozenset({"title", "description", "keywords", "content"})

ContentLoader = typ.Callable[[str, DocMeta], typ.Awaitable[str | None]]


class SearchIndexBuilder:
    """Build :class:`SearchRecord` lists from per-version document metadata."""

    def __init__(
        self, *, strategy: SlugStrategy | None = None, base_path: str = "/docs"
    ) -> None:
        self.strategy = strategy or SlugStrategy()
        self.base_path = base_path

    async def build(
        self,
        documents: typ.Mapping[str, typ.Iterable[DocMeta]],
        fields: typ.Iterable[str] = SEARCH_FIELDS,
        content_for: ContentLoader | None = None,
    ) -> list[SearchRecord]:
        """Return one record per non-landing document, sorted by id.

        Parameters
        ----------
        documents : Mapping[str, Iterable[DocMeta]]
            Document metadata grouped by version.
        fields : Iterable[str], optional
            Optional fields to include: any of ``title``, ``description``,
            ``keywords`` and ``content``. ``id``, ``version`` and ``href`` are
            always present.
        content_for : callable, optional
            ``async (version, meta) -> str | None`` returning plain text. Only
            called when ``content`` is requested.

        Raises
        ------
        ValueError
            If ``fields`` names an unknown field.
        """
        wanted = frozenset(fields)
        unknown = wanted - SEARCH_FIELDS
        if unknown:
            msg = f"Unknown search fields: {', '.join(sorted(unknown))}"
            raise ValueError(msg)

        records: list[SearchRecord] = []
        for version, metas in documents.items():
            for meta in metas:
                if meta.landing:
                    continue
                content = None
                if "content" in wanted and content_for is not None:
                    content = await content_for(version, meta)
                records.append(self.record(version, meta, wanted, content))
        return sorted(records, key=lambda record: record.id)

    def record(
        self,
        version: str,
        meta: DocMeta,
        fields: typ.AbstractSet[str],
        content: str | None = None,
    ) -> SearchRecord:
        """Return the record for one document, gated by ``fields``."""
        slug_path = "/".join(meta.slug)
        return SearchRecord(
            id=f"{version}-{slug_path}",
            version=version,
            href=self.strategy.href(self.base_path, version, meta.slug),
            title=meta.title if "title" in fields else None,
            description=meta.description if "description" in fields else None,
            keywords=list(meta.keywords) if "keywords" in fields else None,
            content=content if "content" in fields else None,
        )


def project_records(
    records: typ.Iterable[SearchRecord], fields: typ.Iterable[str]
) -> list[SearchRecord]:
    """Return copies of ``records`` carrying only the requested optional fields."""
    wanted = frozenset(fields)
    return [
        SearchRecord(
            id=record.id,
            version=record.version,
            href=record.href,
            title=record.title if "title" in wanted else None,
            description=record.description if "description" in wanted else None,
            keywords=record.keywords if "keywords" in wanted else None,
            content=record.content if "content" in wanted else None,
        )
        for record in records
    ]


def filter_records(
    records: typ.Iterable[SearchRecord],
    query: str,
    *,
    version: str | None = None,
    limit: int | None = None,
) -> list[SearchRecord]:
    """Return records whose text fields contain ``query`` (case-insensitive).

    ``version`` of ``None`` or ``"all"`` searches every version. A ``limit``
    of ``None`` or ``0`` returns every match. Input order is preserved.
    """
    needle = query.casefold()
    matches: list[SearchRecord] = []
    for record in records:
        if version not in (None, "all") and record.version != version:
            continue
        haystack = [record.title or "", record.description or "", record.content or ""]
        haystack.extend(record.keywords or [])
        if any(needle in text.casefold() for text in haystack):
            matches.append(record)
            if limit and len(matches) >= limit:
                break
    return matches


__all__ = [
    "SEARCH_FIELDS",
    "SearchIndexBuilder",
    "filter_records",
    "project_records",
]
