"""Explicit engine context shared by the build and read paths.

A :class:`DocsContext` bundles every component configured from one
:class:`~docxes.config.EngineConfig`. It holds an optional, immutable
:class:`~docxes.models.Manifest`; queries are answered from it when present
and computed on demand from the content tree otherwise. After a rebuild,
callers swap in a fresh context with :meth:`DocsContext.with_manifest`
rather than mutating the existing one.

Example
-------
>>> import asyncio
>>> from docxes.config import EngineConfig
>>> context = asyncio.run(DocsContext.open(EngineConfig()))  # doctest: +SKIP
>>> asyncio.run(context.list_versions())  # doctest: +SKIP
['v1', 'v2']
"""

from __future__ import annotations

import asyncio
import logging
import typing as typ

from .cache import (
    ArtifactStore,
    CacheChain,
    ComputeTier,
    ContentStore,
    MappingTier,
    MemoryTier,
)
from .documents import DocumentLoader, walk_documents
from .errors import DocxesError
from .manifest import ManifestStore
from .models import DocFile, DocMeta, doc_key
from .navigation import NavigationBuilder
from .pipeline import PluginPipeline, ProcessedOutput, Processor
from .resolver import DocumentResolver
from .search import SEARCH_FIELDS, SearchIndexBuilder, filter_records, project_records
from .slugs import SlugStrategy, normalize_slug
from .versions import VersionStore

if typ.TYPE_CHECKING:
    from .cache.chain import CacheTier
    from .config import EngineConfig
    from .models import Manifest, NavItem, SearchRecord

logger = logging.getLogger(__name__)


class DocsContext:
    """Configured components plus the manifest they may answer from."""

    def __init__(
        self,
        config: EngineConfig,
        *,
        manifest: Manifest | None = None,
        plugins: PluginPipeline | None = None,
    ) -> None:
        """Wire the components described by ``config``.

        Parameters
        ----------
        config : EngineConfig
            Resolved engine configuration.
        manifest : Manifest, optional
            Snapshot to answer queries from. Ignored in development mode.
        plugins : PluginPipeline, optional
            Pre-built plugin pipeline; by default the plugins named in
            ``config.plugins`` are imported.

        Raises
        ------
        ConfigError
            If a configured plugin reference cannot be loaded.
        """
        self.config = config
        self.manifest = None if config.development else manifest
        self.plugins = plugins or PluginPipeline.from_references(config.plugins)
        self.strategy = SlugStrategy(config.slug_mode)
        self.versions = VersionStore(config.content_root)
        self.resolver = DocumentResolver(config.content_root, self.strategy)
        self.blobs = ContentStore(config.blob_dir, ProcessedOutput)
        self.artifacts = ArtifactStore(config.data_dir)
        self.manifests = ManifestStore(config.manifest_path)
        self.processor = Processor(
            store=self.blobs,
            plugins=self.plugins,
            options=config.compiler,
            slug_mode=config.slug_mode,
            development=config.development,
        )
        self.loader = DocumentLoader(config.content_root, self.resolver, self.processor)
        self.search_builder = SearchIndexBuilder(
            strategy=self.strategy, base_path=config.base_path
        )
        self.meta_memory: MemoryTier[DocMeta] = MemoryTier()
        self.meta_chain: CacheChain[DocMeta] = CacheChain(self._meta_tiers())

    @classmethod
    async def open(cls, config: EngineConfig) -> DocsContext:
        """Return a context answering from the persisted manifest, if any."""
        manifest = None
        if not config.development:
            manifest = await ManifestStore(config.manifest_path).load()
        return cls(config, manifest=manifest)

    def with_manifest(self, manifest: Manifest | None) -> DocsContext:
        """Return a new context sharing configuration and plugins."""
        return type(self)(self.config, manifest=manifest, plugins=self.plugins)

    def navigation_builder(
        self, lookup: typ.Callable[..., typ.Awaitable[DocMeta | None]] | None = None
    ) -> NavigationBuilder:
        """Return a builder resolving metadata through ``lookup``."""
        return NavigationBuilder(
            self.config.content_root,
            lookup or self.get_doc_meta,
            strategy=self.strategy,
            base_path=self.config.base_path,
        )

    async def list_versions(self) -> list[str]:
        if self.manifest is not None:
            return list(self.manifest.versions)
        return await self.versions.list_versions()

    async def get_navigation(self, version: str) -> list[NavItem]:
        """Return the navigation tree for ``version``; ``[]`` when unknown."""
        if self.manifest is not None and version in self.manifest.navigation:
            return list(self.manifest.navigation[version])
        return await self.navigation_builder().build(version)

    async def get_doc_meta(
        self, version: str, slug: typ.Sequence[str]
    ) -> DocMeta | None:
        """Return document metadata via memory, manifest, then computation."""
        return await self.meta_chain.get(doc_key(version, normalize_slug(slug)))

    async def get_doc(self, version: str, slug: typ.Sequence[str]) -> DocFile | None:
        """Return the processed document or ``None`` when it does not exist.

        A persisted artifact is returned when its stored source still matches
        the file on disk; otherwise the document is processed on demand.

        Raises
        ------
        ReadFailure
            If the backing file exists but cannot be read.
        CompileFailure
            If the document cannot be parsed or compiled.
        """
        entry = await self.loader.locate(version, slug)
        if entry is None:
            return None
        data = await self.loader.read(entry.path)
        if not self.config.development:
            artifact = await self.artifacts.load(version, entry.slug)
            if self._is_current(artifact, data):
                return artifact
        return await self.loader.load_entry(version, entry, data)

    async def get_all_docs(self, version: str) -> list[tuple[str, ...]]:
        """Return the slug of every non-landing document of ``version``."""
        if self.manifest is not None and version in self.manifest.versions:
            prefix = f"{version}/"
            return sorted(
                meta.slug
                for key, meta in self.manifest.docs.items()
                if key.startswith(prefix) and not meta.landing
            )
        entries = await walk_documents(self.config.content_root, version)
        return [entry.slug for entry in entries if not entry.landing]

    async def get_search_index(
        self, fields: typ.Iterable[str] = SEARCH_FIELDS
    ) -> list[SearchRecord]:
        """Return search records carrying the requested optional ``fields``."""
        if self.manifest is not None:
            return project_records(self.manifest.search_index, fields)
        docs: dict[str, list[DocFile]] = {}
        for version in await self.list_versions():
            docs[version] = await self._load_version(version)
        return await build_search_index(self.search_builder, docs, fields)

    async def search(
        self,
        query: str,
        version: str | None = None,
        limit: int | None = None,
    ) -> list[SearchRecord]:
        """Return records containing ``query``; ``[]`` for a blank query."""
        if not query.strip():
            return []
        records = await self.get_search_index()
        return filter_records(records, query.strip(), version=version, limit=limit)

    def _is_current(self, artifact: DocFile | None, data: bytes) -> bool:
        return (
            artifact is not None
            and artifact.fingerprint == self.processor.fingerprint
            and artifact.raw_source.encode("utf-8") == data
        )

    def _meta_tiers(self) -> list[CacheTier[DocMeta]]:
        tiers: list[CacheTier[DocMeta]] = [self.meta_memory]
        if self.manifest is not None:
            tiers.append(MappingTier(self.manifest.docs))
        tiers.append(ComputeTier(self._compute_meta))
        return tiers

    async def _compute_meta(self, key: str) -> DocMeta | None:
        version, *slug = key.split("/")
        try:
            doc = await self.get_doc(version, slug)
        except DocxesError as exc:
            logger.warning("Cannot compute metadata for '%s': %s", key, exc)
            return None
        return doc.meta() if doc is not None else None

    async def _load_version(self, version: str) -> list[DocFile]:
        entries = await walk_documents(self.config.content_root, version)
        results = await asyncio.gather(
            *(self.get_doc(version, entry.slug) for entry in entries),
            return_exceptions=True,
        )
        docs: list[DocFile] = []
        for entry, result in zip(entries, results, strict=True):
            if isinstance(result, DocxesError):
                key = doc_key(version, entry.slug)
                logger.error("Skipping '%s': %s", key, result)
                continue
            if isinstance(result, BaseException):
                raise result
            if result is not None:
                docs.append(result)
        return docs


async def build_search_index(
    builder: SearchIndexBuilder,
    docs: typ.Mapping[str, typ.Iterable[DocFile]],
    fields: typ.Iterable[str] = SEARCH_FIELDS,
) -> list[SearchRecord]:
    """Index ``docs`` (grouped by version), using their plain text as content."""
    grouped = {version: list(items) for version, items in docs.items()}
    plain_text = {
        doc_key(version, doc.slug): doc.plain_text
        for version, items in grouped.items()
        for doc in items
    }

    async def content_for(version: str, meta: DocMeta) -> str | None:
        return plain_text.get(doc_key(version, meta.slug))

    metas = {
        version: [doc.meta() for doc in items] for version, items in grouped.items()
    }
    return await builder.build(metas, fields, content_for)


__all__ = ["DocsContext", "build_search_index"]
