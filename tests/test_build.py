"""Tests for full and incremental builds.

Each test builds the ``sample_site`` fixture into ``tmp_path`` and inspects
the report plus the files written to the cache root and the public directory.
Separate :class:`DocsContext` instances are used for consecutive builds so
nothing carries over in memory between them.
"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import re
import typing as typ

import msgspec
import pytest
from bs4 import BeautifulSoup

from docxes.build import BuildOrchestrator, BuildReport
from docxes.cache import content_digest
from docxes.config import CompilerOptions, EngineConfig, SitemapConfig
from docxes.context import DocsContext
from docxes.documents import DocumentLoader
from docxes.errors import BuildError
from docxes.models import Manifest, SearchRecord

if typ.TYPE_CHECKING:
    from pathlib import Path

ALL_KEYS = ["v1", "v1/guides", "v1/guides/setup", "v1/intro", "v2/intro"]
GENERATED_AT = re.compile(r'"generated_at": "[^"]*"')


def _build(config: EngineConfig, *, incremental: bool = True) -> BuildReport:
    context = DocsContext(config)
    return asyncio.run(BuildOrchestrator(context).build(incremental=incremental))


def _manifest_text(config: EngineConfig) -> str:
    text = config.manifest_path.read_text(encoding="utf-8")
    return GENERATED_AT.sub('"generated_at": ""', text)


@pytest.mark.usefixtures("sample_site")
def test_full_build_writes_manifest_and_artifacts(engine_config: EngineConfig) -> None:
    report = _build(engine_config)

    assert report.ok, f"unexpected failures: {report.failed}"
    assert sorted(report.processed) == ALL_KEYS
    assert report.skipped == []
    for path in (
        engine_config.manifest_path,
        engine_config.hashes_path,
        engine_config.search_index_path,
        engine_config.data_dir / "v1.json",
        engine_config.data_dir / "v1" / "guides.json",
        engine_config.data_dir / "v1" / "guides" / "setup.json",
    ):
        assert path.is_file(), f"expected {path} to be written"
    assert not engine_config.sitemap_path.exists(), "sitemap is disabled by default"

    manifest = msgspec.json.decode(
        engine_config.manifest_path.read_bytes(), type=Manifest
    )
    assert manifest.versions == ["v1", "v2"]
    assert sorted(manifest.docs) == ALL_KEYS
    assert manifest.version_metadata["v1"].title == "Version One"
    assert manifest.version_metadata["v2"].title is None
    assert manifest.docs["v1/guides/setup"].keywords == ["install", "setup"]
    assert [item.title for item in manifest.navigation["v1"]] == ["Intro", "Guides"]


@pytest.mark.usefixtures("sample_site")
def test_public_search_index_lists_non_landing_documents(
    engine_config: EngineConfig,
) -> None:
    _build(engine_config)

    records = msgspec.json.decode(
        engine_config.search_index_path.read_bytes(), type=list[SearchRecord]
    )

    assert [record.id for record in records] == [
        "v1-guides/setup",
        "v1-intro",
        "v2-intro",
    ]
    assert records[0].content == "Install Run the installer."
    assert records[2].href == "/docs/v2/intro"


@pytest.mark.usefixtures("sample_site")
def test_incremental_build_is_idempotent(engine_config: EngineConfig) -> None:
    """An unchanged tree reprocesses nothing and yields the same manifest."""
    _build(engine_config)
    first = _manifest_text(engine_config)

    report = _build(engine_config)

    assert report.processed == [], "no document should be reprocessed"
    assert sorted(report.skipped) == ALL_KEYS
    assert _manifest_text(engine_config) == first, "manifest changed between builds"


def test_editing_one_document_reprocesses_only_it(
    engine_config: EngineConfig, sample_site: Path
) -> None:
    _build(engine_config)
    (sample_site / "v1" / "intro.mdx").write_text(
        "---\ntitle: Introduction\norder: 1\n---\nHello, edited\n", encoding="utf-8"
    )

    report = _build(engine_config)

    assert report.processed == ["v1/intro"]
    assert len(report.skipped) == len(ALL_KEYS) - 1
    assert report.manifest.docs["v1/intro"].title == "Introduction"
    assert report.manifest.navigation["v1"][0].title == "Introduction"


@pytest.mark.usefixtures("sample_site")
def test_full_flag_ignores_stored_hashes(engine_config: EngineConfig) -> None:
    _build(engine_config)
    report = _build(engine_config, incremental=False)
    assert sorted(report.processed) == ALL_KEYS


@pytest.mark.usefixtures("sample_site")
def test_configuration_change_invalidates_unchanged_documents(
    engine_config: EngineConfig,
) -> None:
    _build(engine_config)
    changed = dc.replace(engine_config, compiler=CompilerOptions(highlight=False))

    report = _build(changed)

    assert sorted(report.processed) == ALL_KEYS, "stale artifacts must not be reused"


def test_missing_artifact_is_rebuilt(
    engine_config: EngineConfig, sample_site: Path
) -> None:
    _build(engine_config)
    (engine_config.data_dir / "v2" / "intro.json").unlink()

    report = _build(engine_config)

    assert report.processed == ["v2/intro"]


def test_failed_document_is_isolated_and_retried(
    engine_config: EngineConfig, sample_site: Path
) -> None:
    broken = sample_site / "v1" / "broken.mdx"
    broken.write_text("---\ntitle: [oops\n---\nBody\n", encoding="utf-8")

    report = _build(engine_config)

    assert not report.ok
    assert [failure.key for failure in report.failed] == ["v1/broken"]
    assert sorted(report.processed) == ALL_KEYS, "siblings still build"
    assert "v1/broken" not in report.manifest.docs
    titles = [(item.title, item.href) for item in report.manifest.navigation["v1"]]
    assert ("broken", None) in titles, "the file still appears in navigation"
    hashes = msgspec.json.decode(engine_config.hashes_path.read_bytes())
    assert "v1/broken.mdx" not in hashes, "failed documents keep no digest"

    broken.write_text("---\ntitle: Fixed\n---\nBody\n", encoding="utf-8")
    retry = _build(engine_config)
    assert retry.ok
    assert retry.processed == ["v1/broken"]


def test_removed_document_leaves_manifest(
    engine_config: EngineConfig, sample_site: Path
) -> None:
    _build(engine_config)
    (sample_site / "v2" / "intro.md").unlink()

    report = _build(engine_config)

    assert "v2/intro" not in report.manifest.docs
    assert report.manifest.navigation["v2"] == []
    assert all(record.version != "v2" for record in report.manifest.search_index)


@pytest.mark.usefixtures("sample_site")
def test_sitemap_lists_versions_and_documents(engine_config: EngineConfig) -> None:
    config = dc.replace(
        engine_config,
        sitemap=SitemapConfig(enabled=True, site_url="https://docs.example.com"),
    )

    report = _build(config)

    assert config.sitemap_path in report.written
    soup = BeautifulSoup(config.sitemap_path.read_text(encoding="utf-8"), "html.parser")
    locs = [loc.get_text() for loc in soup.find_all("loc")]
    assert locs == [
        "https://docs.example.com",
        "https://docs.example.com/docs",
        "https://docs.example.com/docs/v1",
        "https://docs.example.com/docs/v1/guides/setup",
        "https://docs.example.com/docs/v1/intro",
        "https://docs.example.com/docs/v2",
        "https://docs.example.com/docs/v2/intro",
    ]
    priorities = [p.get_text() for p in soup.find_all("priority")]
    assert priorities[:3] == ["1.0", "0.9", "0.8"]
    assert priorities[-1] == "0.7"


def test_unwritable_cache_root_aborts_build(
    tmp_path: Path, engine_config: EngineConfig
) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    config = dc.replace(engine_config, cache_root=blocker)

    with pytest.raises(BuildError, match="cache directory"):
        _build(config)


def test_empty_content_root_builds_empty_manifest(engine_config: EngineConfig) -> None:
    report = _build(engine_config)
    assert report.ok
    assert report.manifest.versions == []
    assert report.manifest.search_index == []


def test_nested_non_string_frontmatter_keys_build(
    engine_config: EngineConfig, content_root: Path, write_doc: typ.Callable[..., Path]
) -> None:
    """Integer and null keys below the top level do not break the build."""
    write_doc(content_root, "v1/ok.mdx", "Fine\n", title="Ok")
    mixed = content_root / "v1" / "mixed.mdx"
    mixed.write_text(
        "---\ntitle: Mixed\nmeta:\n  1: a\n  ~: x\n  b: c\n---\nBody\n",
        encoding="utf-8",
    )

    report = _build(engine_config)

    assert report.ok, f"unexpected failures: {report.failed}"
    assert sorted(report.processed) == ["v1/mixed", "v1/ok"]
    blobs = [
        msgspec.json.decode(path.read_bytes())
        for path in engine_config.blob_dir.glob("*.json")
    ]
    metas = [blob["metadata"]["frontmatter"].get("meta") for blob in blobs]
    assert {"1": "a", "None": "x", "b": "c"} in metas, "cached with string keys"
    assert (engine_config.data_dir / "v1" / "mixed.json").is_file()
    assert (engine_config.data_dir / "v1" / "ok.json").is_file()


@pytest.mark.usefixtures("sample_site")
def test_each_document_is_read_once_per_build(
    engine_config: EngineConfig, monkeypatch: pytest.MonkeyPatch
) -> None:
    """The stored digest describes exactly the bytes that were processed."""
    reads: list[Path] = []
    original = DocumentLoader.read

    async def counting_read(self: DocumentLoader, path: Path) -> bytes:
        reads.append(path)
        return await original(self, path)

    monkeypatch.setattr(DocumentLoader, "read", counting_read)
    report = _build(engine_config)

    assert report.ok
    assert len(reads) == len(set(reads)) == len(ALL_KEYS)
    hashes = msgspec.json.decode(engine_config.hashes_path.read_bytes())
    for path in reads:
        key = path.relative_to(engine_config.content_root).as_posix()
        assert hashes[key] == content_digest(path.read_bytes())
