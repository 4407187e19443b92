"""Run one document through plugins, parser, TOC extraction and compiler.

:class:`Processor` is the only place the external collaborators are called.
Results are memoized in a :class:`~docxes.cache.ContentStore` under a
composite key that embeds the cache format, the document key, and digests of
the compiler options, the plugin list, the slug mode and the source text.
Changing any of them produces a different key, so stale entries are simply
never read again.

Example
-------
>>> import asyncio
>>> from pathlib import Path
>>> from docxes.cache import ContentStore
>>> from docxes.pipeline import ProcessedOutput, Processor
>>> store = ContentStore(Path(".docxes/cache"), ProcessedOutput)
>>> processor = Processor(store=store)
>>> output = asyncio.run(processor.process("# Hi\\n", "v1/intro"))  # doctest: +SKIP
>>> output.metadata.toc[0].title  # doctest: +SKIP
'Hi'
"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import hashlib
import inspect
import logging
import typing as typ

import msgspec

from .._constants import CACHE_FORMAT_VERSION
from ..config import CompilerOptions
from ..errors import CompileFailure
from .compiler import compile_markdown
from .models import ParsedDocument, ProcessedMetadata, ProcessedOutput
from .parser import parse_document
from .plugins import HookStage, PluginPipeline
from .toc import derive_plain_text, extract_headings

if typ.TYPE_CHECKING:
    from ..cache import ContentStore
    from ..models import Heading

logger = logging.getLogger(__name__)

ParseFn = typ.Callable[[str], "ParsedDocument | typ.Awaitable[ParsedDocument]"]
CompileFn = typ.Callable[[str, CompilerOptions], "str | typ.Awaitable[str]"]
ExtractFn = typ.Callable[[str], "list[Heading] | typ.Awaitable[list[Heading]]"]


@dc.dataclass(slots=True)
class ProcessorStats:
    """Counters for cache behaviour during a processor's lifetime."""

    hits: int = 0
    misses: int = 0


def _short_digest(payload: bytes) -> str:
    return hashlib.sha256(payload).hexdigest()[:16]


async def _call(fn: typ.Callable[..., typ.Any], *args: typ.Any) -> typ.Any:
    """Await async collaborators; run sync ones on a worker thread."""
    if inspect.iscoroutinefunction(fn):
        return await fn(*args)
    result = await asyncio.to_thread(fn, *args)
    if inspect.isawaitable(result):
        return await result
    return result


def _location(exc: BaseException) -> tuple[int | None, int | None]:
    """Return the (line, column) an exception reports, if any."""
    line = getattr(exc, "line", None)
    if line is None:
        line = getattr(exc, "lineno", None)
    column = getattr(exc, "column", None)
    if column is None:
        column = getattr(exc, "colno", None)
    return (
        line if isinstance(line, int) else None,
        column if isinstance(column, int) else None,
    )


class Processor:
    """Turn raw document source into compiled output plus metadata."""

    def __init__(
        self,
        *,
        store: ContentStore[ProcessedOutput],
        plugins: PluginPipeline | None = None,
        options: CompilerOptions | None = None,
        slug_mode: str = "slugify",
        development: bool = False,
        parser: ParseFn = parse_document,
        compiler: CompileFn = compile_markdown,
        extractor: ExtractFn = extract_headings,
    ) -> None:
        """Initialize the processor with its collaborators.

        Parameters
        ----------
        store : ContentStore[ProcessedOutput]
            Cache consulted before and written after the pipeline.
        plugins : PluginPipeline, optional
            Ordered plugin hooks; defaults to no plugins.
        options : CompilerOptions, optional
            Options forwarded to ``compiler``.
        slug_mode : str, optional
            Slug strategy name; part of the cache key.
        development : bool, optional
            When ``True`` the cache is bypassed on both read and write.
        parser, compiler, extractor : callable, optional
            Collaborators implementing the parse, compile and heading
            extraction contracts. Sync or async callables are accepted.
        """
        self.store = store
        self.plugins = plugins or PluginPipeline()
        self.options = options or CompilerOptions()
        self.slug_mode = slug_mode
        self.development = development
        self.parser = parser
        self.compiler = compiler
        self.extractor = extractor
        self.stats = ProcessorStats()
        self._config_digest = _short_digest(
            msgspec.json.encode(self.options.fingerprint(), order="deterministic")
        )
        self._plugins_digest = self.plugins.fingerprint()
        self._slug_digest = _short_digest(slug_mode.encode("utf-8"))

    @property
    def fingerprint(self) -> str:
        """Identify the format, options, plugins and slug mode behind an output."""
        return ":".join(
            [
                f"v{CACHE_FORMAT_VERSION}",
                self._config_digest,
                self._plugins_digest,
                self._slug_digest,
            ]
        )

    def cache_key(self, source: str, key: str) -> str:
        """Return the composite cache key for ``source`` stored as ``key``."""
        source_digest = hashlib.sha256(source.encode("utf-8")).hexdigest()
        return ":".join(
            [
                f"v{CACHE_FORMAT_VERSION}",
                key,
                self._config_digest,
                self._plugins_digest,
                self._slug_digest,
                source_digest,
            ]
        )

    async def process(self, source: str, key: str) -> ProcessedOutput:
        """Process ``source`` for the document identified by ``key``.

        Raises
        ------
        CompileFailure
            If the parser, the compiler or a plugin hook rejects the
            document.
        """
        cache_key = self.cache_key(source, key)
        if not self.development:
            cached = await self.store.get(cache_key)
            if cached is not None:
                self.stats.hits += 1
                return cached
        self.stats.misses += 1

        try:
            output = await self._run(source)
        except CompileFailure:
            raise
        except Exception as exc:
            raise self._failure(key, exc) from exc
        if not self.development:
            await self._remember(cache_key, key, output)
        return output

    async def _remember(
        self, cache_key: str, key: str, output: ProcessedOutput
    ) -> None:
        try:
            await self.store.set(cache_key, output)
        except (TypeError, msgspec.EncodeError) as exc:
            logger.debug("Not caching output for '%s': %s", key, exc)

    async def _run(self, source: str) -> ProcessedOutput:
        source = await self.plugins.run(HookStage.BEFORE_PARSE, source)
        parsed = await _call(self.parser, source)
        parsed = await self.plugins.run(HookStage.AFTER_PARSE, parsed)

        toc = list(await _call(self.extractor, parsed.content))
        plain_text = derive_plain_text(parsed.content)

        content = await self.plugins.run(HookStage.BEFORE_COMPILE, parsed.content)
        compiled = await _call(self.compiler, content, self.options)
        compiled = await self.plugins.run(HookStage.AFTER_RENDER, compiled)

        return ProcessedOutput(
            compiled=compiled,
            metadata=ProcessedMetadata(
                frontmatter=dict(parsed.frontmatter),
                toc=toc,
                ast=parsed.ast,
                plain_text=plain_text,
            ),
        )

    @staticmethod
    def _failure(key: str, exc: Exception) -> CompileFailure:
        line, column = _location(exc)
        message = str(exc) or type(exc).__name__
        return CompileFailure(key, message, line=line, column=column)


__all__ = ["Processor", "ProcessorStats"]
