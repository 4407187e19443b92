"""Typed dataclasses describing the docxes engine configuration."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

from .._constants import (
    BLOB_DIRNAME,
    DATA_DIRNAME,
    FILE_HASHES_FILENAME,
    MANIFEST_FILENAME,
    SEARCH_INDEX_FILENAME,
    SITEMAP_FILENAME,
)

MODES = ("production", "development")
SLUG_MODES = ("slugify", "preserve")
DEFAULT_EXTENSIONS = ("fenced_code", "codehilite", "tables", "sane_lists", "toc")


@dc.dataclass(slots=True)
class CompilerOptions:
    """Options forwarded to the Markdown compiler.

    Any change here alters the compiler fingerprint and therefore every
    composite cache key.
    """

    pygments_style: str = "monokai"
    highlight: bool = True
    extensions: list[str] = dc.field(default_factory=lambda: list(DEFAULT_EXTENSIONS))

    def fingerprint(self) -> dict[str, object]:
        """Return a JSON-friendly mapping that identifies these options."""
        return {
            "pygments_style": self.pygments_style,
            "highlight": self.highlight,
            "extensions": list(self.extensions),
        }


@dc.dataclass(slots=True)
class SitemapConfig:
    """Sitemap generation toggle and the absolute site URL."""

    enabled: bool = False
    site_url: str = "http://localhost:3000"


@dc.dataclass(slots=True)
class EngineConfig:
    """A fully resolved engine configuration.

    Attributes
    ----------
    content_root : Path
        Directory whose top-level folders are versions.
    cache_root : Path
        Directory holding the manifest, hash map, blobs and artifacts.
    public_dir : Path
        Directory receiving client-facing files (search index, sitemap).
    base_path : str
        URL prefix for generated hrefs, e.g. ``/docs``.
    mode : str
        ``"production"`` (cache authoritative) or ``"development"`` (cache
        bypassed).
    slug_mode : str
        ``"slugify"`` or ``"preserve"``; controls navigation href segments.
    plugins : list[str]
        ``module:attribute`` references to plugin objects.
    """

    content_root: Path = Path("content/docs")
    cache_root: Path = Path(".docxes")
    public_dir: Path = Path("public")
    base_path: str = "/docs"
    mode: str = "production"
    slug_mode: str = "slugify"
    plugins: list[str] = dc.field(default_factory=list)
    compiler: CompilerOptions = dc.field(default_factory=CompilerOptions)
    sitemap: SitemapConfig = dc.field(default_factory=SitemapConfig)

    @property
    def development(self) -> bool:
        return self.mode == "development"

    @property
    def manifest_path(self) -> Path:
        return self.cache_root / MANIFEST_FILENAME

    @property
    def hashes_path(self) -> Path:
        return self.cache_root / FILE_HASHES_FILENAME

    @property
    def data_dir(self) -> Path:
        return self.cache_root / DATA_DIRNAME

    @property
    def blob_dir(self) -> Path:
        return self.cache_root / BLOB_DIRNAME

    @property
    def search_index_path(self) -> Path:
        return self.public_dir / SEARCH_INDEX_FILENAME

    @property
    def sitemap_path(self) -> Path:
        return self.public_dir / SITEMAP_FILENAME


__all__ = [
    "DEFAULT_EXTENSIONS",
    "MODES",
    "SLUG_MODES",
    "CompilerOptions",
    "EngineConfig",
    "SitemapConfig",
]
