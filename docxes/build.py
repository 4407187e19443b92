"""Build every version into the manifest, artifacts and public snapshots.

:class:`BuildOrchestrator` drives one build over a :class:`DocsContext`.
Versions are built concurrently, and so are the documents within a version.
Each document moves from *unknown* to *hash-checked*, then is either
*skipped* (unchanged digest and a usable artifact) or *recompiled* and
*persisted*. A document that fails is logged with its key and left out of the
manifest; its stored digest is not updated, so the next incremental build
retries it. Only builder-scoped problems, such as an unwritable cache
directory, abort the build with :class:`~docxes.errors.BuildError`.

Example
-------
>>> import asyncio
>>> from docxes.config import load_engine_config
>>> from docxes.context import DocsContext
>>> context = DocsContext(load_engine_config())  # doctest: +SKIP
>>> report = asyncio.run(BuildOrchestrator(context).build())  # doctest: +SKIP
>>> report.ok  # doctest: +SKIP
True
"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import logging
import typing as typ

import msgspec

from .cache import HashTracker, content_digest
from .cache._io import encode_json, write_atomic
from .context import build_search_index
from .documents import walk_documents
from .errors import BuildError, DocxesError
from .manifest import timestamp
from .models import DocFile, DocMeta, Manifest, NavItem, VersionMeta, doc_key
from .sitemap import SitemapBuilder

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .context import DocsContext
    from .documents import DocumentEntry

logger = logging.getLogger(__name__)


@dc.dataclass(frozen=True, slots=True)
class DocumentFailure:
    """A document that could not be built, with the reason."""

    key: str
    error: str


@dc.dataclass(slots=True)
class BuildReport:
    """Outcome of one build.

    Attributes
    ----------
    manifest : Manifest
        The manifest that was persisted.
    processed : list[str]
        Keys of documents that went through the pipeline.
    skipped : list[str]
        Keys of unchanged documents reused from their artifacts.
    failed : list[DocumentFailure]
        Documents left out of the manifest.
    written : list[Path]
        Files written at the end of the build.
    """

    manifest: Manifest
    processed: list[str] = dc.field(default_factory=list)
    skipped: list[str] = dc.field(default_factory=list)
    failed: list[DocumentFailure] = dc.field(default_factory=list)
    written: list[Path] = dc.field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


@dc.dataclass(slots=True)
class _VersionResult:
    version: str
    docs: list[DocFile] = dc.field(default_factory=list)
    navigation: list[NavItem] = dc.field(default_factory=list)
    processed: list[str] = dc.field(default_factory=list)
    skipped: list[str] = dc.field(default_factory=list)
    failed: list[DocumentFailure] = dc.field(default_factory=list)


class BuildOrchestrator:
    """Run full or incremental builds for a :class:`DocsContext`."""

    def __init__(self, context: DocsContext) -> None:
        self.context = context
        self.config = context.config
        self.tracker = HashTracker(self.config.hashes_path)

    async def build(self, *, incremental: bool = True) -> BuildReport:
        """Build all versions and persist the results.

        Parameters
        ----------
        incremental : bool, optional
            When ``True`` (default) documents whose digest matches the stored
            one reuse their persisted artifact. ``False`` ignores stored
            digests and recompiles everything that misses the content cache.

        Returns
        -------
        BuildReport
            Manifest plus per-document outcomes and the files written.

        Raises
        ------
        BuildError
            If the cache directory or an output file cannot be written.
        """
        await self._prepare_cache_root()
        if incremental:
            await self.tracker.load()
        else:
            self.tracker.hashes = {}

        versions = await self.context.versions.list_versions()
        results = await asyncio.gather(
            *(self._build_version(version) for version in versions)
        )

        manifest = await self._assemble(versions, results)
        report = BuildReport(manifest=manifest)
        for result in results:
            report.processed.extend(result.processed)
            report.skipped.extend(result.skipped)
            report.failed.extend(result.failed)
        report.written = await self._persist(manifest)
        logger.info(
            "Built %d versions: %d processed, %d skipped, %d failed",
            len(versions),
            len(report.processed),
            len(report.skipped),
            len(report.failed),
        )
        return report

    async def _prepare_cache_root(self) -> None:
        try:
            await asyncio.to_thread(
                self.config.cache_root.mkdir, parents=True, exist_ok=True
            )
        except OSError as exc:
            msg = f"Cannot create cache directory '{self.config.cache_root}': {exc}"
            raise BuildError(msg) from exc

    async def _build_version(self, version: str) -> _VersionResult:
        result = _VersionResult(version)
        try:
            entries = await walk_documents(self.config.content_root, version)
        except DocxesError as exc:
            logger.error("Cannot walk version '%s': %s", version, exc)
            result.failed.append(DocumentFailure(version, str(exc)))
            return result

        outcomes = await asyncio.gather(
            *(self._build_document(version, entry) for entry in entries)
        )
        for entry, (doc, state, error) in zip(entries, outcomes, strict=True):
            key = doc_key(version, entry.slug)
            if doc is None:
                result.failed.append(DocumentFailure(key, error or "unknown error"))
                continue
            result.docs.append(doc)
            if state == "skipped":
                result.skipped.append(key)
            else:
                result.processed.append(key)

        metas = {doc_key(version, doc.slug): doc.meta() for doc in result.docs}

        async def lookup(name: str, slug: tuple[str, ...]) -> DocMeta | None:
            return metas.get(doc_key(name, slug))

        builder = self.context.navigation_builder(lookup)
        try:
            result.navigation = await builder.build(version)
        except DocxesError as exc:
            logger.error("Cannot build navigation for '%s': %s", version, exc)
            result.failed.append(DocumentFailure(version, str(exc)))
        return result

    async def _build_document(
        self, version: str, entry: DocumentEntry
    ) -> tuple[DocFile | None, str, str | None]:
        key = doc_key(version, entry.slug)
        loader = self.context.loader
        source_key = loader.relative(entry.path)
        try:
            data = await loader.read(entry.path)
            digest = await asyncio.to_thread(content_digest, data)
            if not self.tracker.has_changed(source_key, digest):
                doc = await self.context.artifacts.load(version, entry.slug)
                if doc is not None and doc.fingerprint == loader.processor.fingerprint:
                    logger.debug("Skipping unchanged document '%s'", key)
                    return doc, "skipped", None
            doc = await loader.load_entry(version, entry, data)
            await self.context.artifacts.save(version, entry.slug, doc)
        except (DocxesError, OSError, msgspec.EncodeError, TypeError) as exc:
            logger.error("Failed to build '%s': %s", key, exc)
            return None, "failed", str(exc)
        self.tracker.update(source_key, digest)
        return doc, "recompiled", None

    async def _assemble(
        self, versions: list[str], results: typ.Sequence[_VersionResult]
    ) -> Manifest:
        docs: dict[str, DocMeta] = {}
        version_metadata: dict[str, VersionMeta] = {}
        navigation: dict[str, list[NavItem]] = {}
        for result in results:
            navigation[result.version] = result.navigation
            landing = VersionMeta()
            for doc in result.docs:
                docs[doc_key(result.version, doc.slug)] = doc.meta()
                if not doc.slug:
                    landing = VersionMeta(title=doc.title, description=doc.description)
            version_metadata[result.version] = landing

        search_index = await build_search_index(
            self.context.search_builder,
            {result.version: result.docs for result in results},
        )
        return Manifest(
            versions=list(versions),
            version_metadata=version_metadata,
            navigation=navigation,
            docs=docs,
            search_index=search_index,
            generated_at=timestamp(),
        )

    async def _persist(self, manifest: Manifest) -> list[Path]:
        written: list[Path] = []
        try:
            written.append(await self.context.manifests.save(manifest))
            await self.tracker.save()
            written.append(self.tracker.path)
            search_path = self.config.search_index_path
            await asyncio.to_thread(
                write_atomic, search_path, encode_json(manifest.search_index)
            )
            written.append(search_path)
            if self.config.sitemap.enabled:
                sitemap = SitemapBuilder(
                    self.config.sitemap,
                    base_path=self.config.base_path,
                    strategy=self.context.strategy,
                )
                written.append(
                    await asyncio.to_thread(
                        sitemap.write, manifest, self.config.sitemap_path
                    )
                )
        except OSError as exc:
            msg = f"Cannot write build output: {exc}"
            raise BuildError(msg) from exc
        return written


__all__ = ["BuildOrchestrator", "BuildReport", "DocumentFailure"]
