"""Tests for the persisted caches and the layered lookup chain."""

from __future__ import annotations

import asyncio
import typing as typ

import msgspec

from docxes.cache import (
    ArtifactStore,
    CacheChain,
    ComputeTier,
    ContentStore,
    HashTracker,
    MappingTier,
    MemoryTier,
    content_digest,
)
from docxes.models import DocFile, Heading

if typ.TYPE_CHECKING:
    from pathlib import Path


def test_hash_tracker_detects_changes(tmp_path: Path) -> None:
    tracker = HashTracker(tmp_path / "file-hashes.json")
    assert tracker.has_changed("v1/intro.mdx", "abc"), "unknown paths have changed"

    tracker.update("v1/intro.mdx", "abc")
    assert not tracker.has_changed("v1/intro.mdx", "abc")
    assert tracker.has_changed("v1/intro.mdx", "def")

    tracker.remove("v1/intro.mdx")
    assert tracker.stored("v1/intro.mdx") is None


def test_hash_tracker_persists_map(tmp_path: Path) -> None:
    path = tmp_path / "cache" / "file-hashes.json"
    tracker = HashTracker(path)
    tracker.update("v1/a.md", "1")
    tracker.update("v1/b.md", "2")
    asyncio.run(tracker.save())

    reloaded = HashTracker(path)
    asyncio.run(reloaded.load())
    assert reloaded.hashes == {"v1/a.md": "1", "v1/b.md": "2"}
    assert path.read_text(encoding="utf-8").endswith("\n")


def test_hash_tracker_corrupt_file_starts_fresh(tmp_path: Path) -> None:
    path = tmp_path / "file-hashes.json"
    path.write_text("{not json", encoding="utf-8")
    tracker = HashTracker(path)
    asyncio.run(tracker.load())
    assert tracker.hashes == {}


def test_hash_tracker_digest_matches_content(tmp_path: Path) -> None:
    path = tmp_path / "doc.md"
    path.write_bytes(b"hello")
    digest = asyncio.run(HashTracker.digest(path))
    assert digest == content_digest(b"hello")


def test_content_store_round_trip_and_corruption(tmp_path: Path) -> None:
    store = ContentStore(tmp_path / "cache", Heading)
    asyncio.run(store.set("v3:v1/intro:abc", Heading(id="a", title="A", depth=1)))

    assert asyncio.run(store.get("v3:v1/intro:abc")) == Heading(
        id="a", title="A", depth=1
    )
    assert store.path_for("v3:v1/intro:abc").name.endswith(".json")
    assert asyncio.run(store.get("missing")) is None

    store.path_for("v3:v1/intro:abc").write_text("garbage", encoding="utf-8")
    assert asyncio.run(store.get("v3:v1/intro:abc")) is None, "corrupt blob is a miss"

    store.clean()
    assert not (tmp_path / "cache").exists()


def test_artifact_store_layout(tmp_path: Path) -> None:
    artifacts = ArtifactStore(tmp_path / "data")
    assert artifacts.path_for("v1", ("guides", "setup")) == (
        tmp_path / "data" / "v1" / "guides" / "setup.json"
    )
    assert artifacts.path_for("v1", ()) == tmp_path / "data" / "v1.json"


def test_artifact_store_round_trip(tmp_path: Path) -> None:
    artifacts = ArtifactStore(tmp_path / "data")
    doc = DocFile(
        slug=("intro",),
        source_path="v1/intro.mdx",
        title="Intro",
        compiled_content="<p>Hello</p>",
        raw_source="Hello",
        plain_text="Hello",
    )
    asyncio.run(artifacts.save("v1", doc.slug, doc))
    assert asyncio.run(artifacts.load("v1", doc.slug)) == doc

    artifacts.path_for("v1", doc.slug).write_bytes(msgspec.json.encode({"x": 1}))
    assert asyncio.run(artifacts.load("v1", doc.slug)) is None


def test_cache_chain_checks_tiers_in_order_and_backfills() -> None:
    computed: list[str] = []

    async def compute(key: str) -> str | None:
        computed.append(key)
        return None if key == "v1/missing" else f"computed:{key}"

    memory: MemoryTier[str] = MemoryTier()
    manifest = MappingTier({"v1/intro": "manifest"})
    chain = CacheChain([memory, manifest, ComputeTier(compute)])

    assert asyncio.run(chain.get("v1/intro")) == "manifest"
    assert asyncio.run(chain.get("v1/other")) == "computed:v1/other"
    assert asyncio.run(chain.get("v1/other")) == "computed:v1/other"
    assert asyncio.run(chain.get("v1/missing")) is None

    assert computed == ["v1/other", "v1/missing"], "memory tier should answer repeats"
    assert memory.values == {"v1/intro": "manifest", "v1/other": "computed:v1/other"}
