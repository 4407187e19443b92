r"""Heading extraction and plain-text derivation for processed documents.

``extract_headings`` is the default TOC extractor: it walks ATX headings
outside fenced code blocks and assigns GitHub-style anchor ids, suffixing
duplicates with ``-1``, ``-2`` and so on. ``derive_plain_text`` strips markup
so the result can feed the search index and the "is this page clickable"
check.

Example
-------
>>> [h.id for h in extract_headings("# Setup\n## Setup\n```\n# not a heading\n```")]
['setup', 'setup-1']
>>> derive_plain_text("import X from 'x'\n\n<Steps />\n")
''
"""

from __future__ import annotations

import re

from ..models import Heading
from .parser import FENCE_PATTERN, HEADING_PATTERN

LINK_PATTERN = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")
INLINE_MARKUP = re.compile(r"[*`]|~~")
TAG_PATTERN = re.compile(r"<[^>]*>")
COMMENT_PATTERN = re.compile(r"<!--.*?-->|\{/\*.*?\*/\}", re.DOTALL)
ESM_LINE = re.compile(r"^(?:import|export)\s.*$", re.MULTILINE)
BLOCK_PREFIX = re.compile(
    r"^[ \t]{0,3}(?:#{1,6}\s+|>\s?|[-+*]\s+|\d+[.)]\s+)", re.MULTILINE
)
FENCE_LINE = re.compile(r"^[ \t]{0,3}(?:`{3,}|~{3,}).*$", re.MULTILINE)
WHITESPACE = re.compile(r"\s+")


def heading_slug(text: str, separator: str = "-") -> str:
    """Return the anchor id for a heading title.

    The signature matches the ``slugify`` hook of Markdown's ``toc``
    extension so compiled HTML ids agree with the extracted TOC.
    """
    cleaned = re.sub(r"[^\w\s-]", "", text.strip().lower())
    return re.sub(r"\s+", separator, cleaned)


def _inline_text(text: str) -> str:
    stripped = LINK_PATTERN.sub(r"\1", TAG_PATTERN.sub("", text))
    return INLINE_MARKUP.sub("", stripped).strip()


def extract_headings(content: str) -> list[Heading]:
    """Return headings in document order with unique anchor ids."""
    headings: list[Heading] = []
    seen: dict[str, int] = {}
    fence: str | None = None
    for line in content.splitlines():
        fence_match = FENCE_PATTERN.match(line)
        if fence is not None:
            if fence_match and fence_match.group(1).startswith(fence):
                fence = None
            continue
        if fence_match:
            fence = fence_match.group(1)
            continue
        match = HEADING_PATTERN.match(line)
        if not match:
            continue
        title = _inline_text(match.group(2))
        base = heading_slug(title)
        count = seen.get(base, 0)
        seen[base] = count + 1
        anchor = base if count == 0 else f"{base}-{count}"
        headings.append(Heading(id=anchor, title=title, depth=len(match.group(1))))
    return headings


def derive_plain_text(content: str) -> str:
    """Strip markup from ``content`` and collapse whitespace."""
    text = COMMENT_PATTERN.sub(" ", content)
    text = ESM_LINE.sub(" ", text)
    text = FENCE_LINE.sub(" ", text)
    text = TAG_PATTERN.sub(" ", text)
    text = LINK_PATTERN.sub(r"\1", text)
    text = BLOCK_PREFIX.sub("", text)
    text = INLINE_MARKUP.sub("", text)
    return WHITESPACE.sub(" ", text).strip()


__all__ = ["derive_plain_text", "extract_headings", "heading_slug"]
