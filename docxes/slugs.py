"""Slug helpers shared by navigation, resolution, and cache keys."""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

from ._constants import DOC_EXTENSIONS

_WHITESPACE = re.compile(r"\s+")
_NON_WORD = re.compile(r"[^\w-]")


def is_hidden(name: str) -> bool:
    """Return ``True`` for dot-files and names carrying a ``.hidden`` marker."""
    return name.startswith(".") or ".hidden" in name


def strip_doc_extension(name: str) -> str | None:
    """Return ``name`` without its ``.md``/``.mdx`` suffix, or None for other files."""
    for ext in DOC_EXTENSIONS:
        if name.endswith(ext):
            return name[: -len(ext)]
    return None


def slugify(name: str) -> str:
    """Convert a file or directory name into a lowercase URL segment.

    >>> slugify("Getting Started!")
    'getting-started'
    """
    lowered = _WHITESPACE.sub("-", name.strip().lower())
    return _NON_WORD.sub("", lowered)


def normalize_slug(segments: typ.Iterable[str]) -> tuple[str, ...]:
    """Split and clean slug segments, normalizing ``\\`` separators to ``/``."""
    parts: list[str] = []
    for segment in segments:
        parts.extend(part for part in segment.replace("\\", "/").split("/") if part)
    return tuple(parts)


@dc.dataclass(frozen=True, slots=True)
class SlugStrategy:
    """How on-disk names become navigation href segments.

    ``slugify`` lowercases and strips punctuation; ``preserve`` keeps names
    as they are on disk.
    """

    mode: str = "slugify"

    def segment(self, name: str) -> str:
        if self.mode == "preserve":
            return name
        return slugify(name) or name

    def matches(self, name: str, segment: str) -> bool:
        """Return whether on-disk ``name`` maps to the href ``segment``."""
        return name == segment or self.segment(name) == segment

    def href(self, base_path: str, version: str, slug: typ.Sequence[str]) -> str:
        """Return the public URL path for a document slug.

        >>> SlugStrategy().href("/docs", "v1", ["Guides", "Quick Start"])
        '/docs/v1/guides/quick-start'
        """
        segments = [self.segment(name) for name in slug]
        return "/".join([base_path, version, *segments])


__all__ = [
    "SlugStrategy",
    "is_hidden",
    "normalize_slug",
    "slugify",
    "strip_doc_extension",
]
