"""Tests for search-index records and the substring filter."""

from __future__ import annotations

import asyncio

import pytest

from docxes.documents import normalize_keywords
from docxes.models import DocMeta, SearchRecord
from docxes.search import SearchIndexBuilder, filter_records, project_records

DOCS = {
    "v2": [
        DocMeta(slug=("intro",), source_path="v2/intro.md", title="Intro v2"),
    ],
    "v1": [
        DocMeta(slug=(), source_path="v1/main.mdx", title="Home", landing=True),
        DocMeta(
            slug=("Guides", "Setup"),
            source_path="v1/Guides/Setup.mdx",
            title="Setup",
            description="Install things",
            keywords=["install", "setup"],
        ),
        DocMeta(slug=("intro",), source_path="v1/intro.mdx", title="Intro"),
    ],
}


async def _content_for(version: str, meta: DocMeta) -> str | None:
    return f"body of {version}/{'/'.join(meta.slug)}"


def test_index_covers_every_non_landing_document() -> None:
    records = asyncio.run(SearchIndexBuilder().build(DOCS, content_for=_content_for))

    assert [record.id for record in records] == [
        "v1-Guides/Setup",
        "v1-intro",
        "v2-intro",
    ], "records are sorted by id and landing pages are excluded"
    setup = records[0]
    assert setup.href == "/docs/v1/guides/setup"
    assert setup.keywords == ["install", "setup"]
    assert setup.content == "body of v1/Guides/Setup"


def test_fields_gate_optional_attributes() -> None:
    calls: list[str] = []

    async def content_for(version: str, meta: DocMeta) -> str | None:
        calls.append(meta.title)
        return "text"

    records = asyncio.run(
        SearchIndexBuilder(base_path="/manual").build(DOCS, ["title"], content_for)
    )

    assert all(record.description is None for record in records)
    assert all(record.content is None for record in records)
    assert records[1].title == "Intro"
    assert records[1].href == "/manual/v1/intro"
    assert calls == [], "plain text is not loaded unless content is requested"


def test_unknown_field_is_rejected() -> None:
    with pytest.raises(ValueError, match="bogus"):
        asyncio.run(SearchIndexBuilder().build(DOCS, ["title", "bogus"]))


def test_comma_separated_keywords_are_split() -> None:
    assert normalize_keywords("install, setup ,") == ["install", "setup"]
    assert normalize_keywords(["a", " b "]) == ["a", "b"]
    assert normalize_keywords(None) == []


def test_filter_records_is_case_insensitive_and_scoped() -> None:
    records = [
        SearchRecord(id="v1-a", version="v1", href="/a", title="Caching Guide"),
        SearchRecord(id="v1-b", version="v1", href="/b", keywords=["cache"]),
        SearchRecord(id="v2-a", version="v2", href="/c", content="cache hits"),
    ]

    assert [r.id for r in filter_records(records, "CACHE")] == ["v1-a", "v1-b", "v2-a"]
    assert [r.id for r in filter_records(records, "cache", version="v2")] == ["v2-a"]
    assert [r.id for r in filter_records(records, "cache", version="all", limit=1)] == [
        "v1-a"
    ]
    assert filter_records(records, "missing") == []


def test_filter_records_zero_limit_returns_every_match() -> None:
    records = [
        SearchRecord(id=f"v1-{name}", version="v1", href=f"/{name}", title="Cache")
        for name in "abc"
    ]
    assert len(filter_records(records, "cache", limit=0)) == 3
    assert len(filter_records(records, "cache", limit=None)) == 3


def test_project_records_drops_unrequested_fields() -> None:
    record = SearchRecord(
        id="v1-a", version="v1", href="/a", title="A", description="D", content="C"
    )
    (projected,) = project_records([record], ["title"])
    assert projected == SearchRecord(id="v1-a", version="v1", href="/a", title="A")
