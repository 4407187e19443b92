r"""Default compiler: render Markdown/MDX content into highlighted HTML.

Fence lines are tidied before rendering: up to three spaces of indentation
are dropped and ``lang,attrs`` info strings keep only the language. Each
highlighted block is then tagged with the language of the fence it came
from, taken from the same block outline the parser produces.

Example
-------
>>> normalize_fences("  ```python,linenos\nx = 1\n  ```")
'```python\nx = 1\n```'
"""

from __future__ import annotations

import re
import typing as typ
from html import escape

from markdown import Markdown

from .parser import outline
from .toc import heading_slug

if typ.TYPE_CHECKING:
    from ..config import CompilerOptions

FENCE_INFO_PATTERN = re.compile(
    r"^ {0,3}(?P<fence>`{3,}|~{3,})(?P<info>[^\n]*)$", re.MULTILINE
)
LANGUAGE_PATTERN = re.compile(r"[\w+#.-]+")
HIGHLIGHT_BLOCK = '<div class="codehilite">'


def _clean_fence(match: re.Match[str]) -> str:
    info = match["info"]
    language, comma, _attrs = info.partition(",")
    if comma and LANGUAGE_PATTERN.fullmatch(language):
        info = language
    return f"{match['fence']}{info}"


def normalize_fences(content: str) -> str:
    """Return ``content`` with fence lines unindented and attribute-free."""
    return FENCE_INFO_PATTERN.sub(_clean_fence, content)


def fence_languages(content: str) -> list[str]:
    """Return the language of every fenced block, ``"text"`` when unlabelled."""
    return [
        node["lang"] or "text" for node in outline(content) if node["type"] == "code"
    ]


class MarkdownCompiler:
    """Compile document content into HTML with consistent code styling."""

    def compile(self, content: str, options: CompilerOptions) -> str:
        """Render ``content`` into HTML using the configured extensions.

        Parameters
        ----------
        content : str
            Markdown/MDX body with frontmatter already removed.
        options : CompilerOptions
            Extension list, highlighting toggle and Pygments style.

        Returns
        -------
        str
            HTML fragment. Highlighted code blocks carry a ``data-language``
            attribute.
        """
        normalized = normalize_fences(content)
        if not normalized.strip():
            return ""
        extensions = [
            name
            for name in options.extensions
            if options.highlight or name != "codehilite"
        ]
        md = Markdown(
            extensions=extensions,
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": options.pygments_style,
                },
                "toc": {"slugify": heading_slug},
            },
            output_format="html",
        )
        html = md.convert(normalized)
        if "codehilite" in extensions:
            html = self._tag_languages(html, fence_languages(normalized))
        return html

    @staticmethod
    def _tag_languages(html: str, languages: list[str]) -> str:
        parts = html.split(HIGHLIGHT_BLOCK)
        tagged = [parts[0]]
        for index, part in enumerate(parts[1:]):
            language = languages[index] if index < len(languages) else "text"
            tagged.append(
                f'<div class="codehilite" data-language="{escape(language)}">{part}'
            )
        return "".join(tagged)


def compile_markdown(content: str, options: CompilerOptions) -> str:
    """Compile ``content`` with a fresh :class:`MarkdownCompiler`."""
    return MarkdownCompiler().compile(content, options)


__all__ = [
    "MarkdownCompiler",
    "compile_markdown",
    "fence_languages",
    "normalize_fences",
]
