"""Render ``sitemap.xml`` from a build manifest.

The sitemap lists the site root, the docs root, every version and every
non-landing document of each version, using the same hrefs as navigation.
Rendering uses a Jinja template shipped in ``docxes/templates``.
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from .cache._io import write_atomic
from .slugs import SlugStrategy

if typ.TYPE_CHECKING:
    from .config import SitemapConfig
    from .models import Manifest


@dc.dataclass(frozen=True, slots=True)
class SitemapEntry:
    loc: str
    changefreq: str
    priority: float


class SitemapBuilder:
    """Build and write the sitemap for a manifest."""

    def __init__(
        self,
        config: SitemapConfig,
        *,
        base_path: str = "/docs",
        strategy: SlugStrategy | None = None,
        templates_dir: Path | None = None,
    ) -> None:
        self.config = config
        self.base_path = base_path
        self.strategy = strategy or SlugStrategy()
        self.templates_dir = templates_dir or Path(__file__).parent / "templates"
        self.env = Environment(
            loader=FileSystemLoader(self.templates_dir),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.env.get_template("sitemap.xml.jinja")

    def entries(self, manifest: Manifest) -> list[SitemapEntry]:
        """Return sitemap entries in version order, documents sorted by slug."""
        site = self.config.site_url
        items = [
            SitemapEntry(loc=site or "/", changefreq="weekly", priority=1.0),
            SitemapEntry(
                loc=f"{site}{self.base_path}", changefreq="weekly", priority=0.9
            ),
        ]
        for version in manifest.versions:
            items.append(
                SitemapEntry(
                    loc=f"{site}{self.base_path}/{version}",
                    changefreq="weekly",
                    priority=0.8,
                )
            )
            metas = sorted(
                (
                    meta
                    for key, meta in manifest.docs.items()
                    if key.split("/", 1)[0] == version and not meta.landing
                ),
                key=lambda meta: meta.slug,
            )
            items.extend(
                SitemapEntry(
                    loc=site + self.strategy.href(self.base_path, version, meta.slug),
                    changefreq="monthly",
                    priority=0.7,
                )
                for meta in metas
            )
        return items

    def render(self, manifest: Manifest) -> str:
        """Return the sitemap XML for ``manifest``."""
        lastmod = _lastmod(manifest.generated_at)
        xml = self.template.render(entries=self.entries(manifest), lastmod=lastmod)
        if not xml.endswith("\n"):
            xml += "\n"
        return xml

    def write(self, manifest: Manifest, output_path: Path) -> Path:
        """Render the sitemap to ``output_path`` and return the path."""
        write_atomic(output_path, self.render(manifest).encode("utf-8"))
        return output_path


def _lastmod(generated_at: str) -> str:
    """Return the ``YYYY-MM-DD`` date of an ISO timestamp, or today's date."""
    try:
        moment = dt.datetime.fromisoformat(generated_at)
    except ValueError:
        moment = dt.datetime.now(dt.UTC)
    return moment.date().isoformat()


__all__ = ["SitemapBuilder", "SitemapEntry"]
