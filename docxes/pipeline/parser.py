r"""Default parser: split YAML frontmatter from Markdown/MDX content.

The parser returns the body content, the frontmatter mapping and a shallow
block outline that stands in for a full syntax tree. The engine treats the
outline as opaque; it is stored with the processed output and nothing more.

Example
-------
>>> doc = parse_document("---\ntitle: Intro\norder: 1\n---\n# Hello\n")
>>> doc.frontmatter
{'title': 'Intro', 'order': 1}
>>> doc.ast[0]
{'type': 'heading', 'depth': 1, 'text': 'Hello'}
"""

from __future__ import annotations

import re
import typing as typ

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .models import ParsedDocument

FRONTMATTER_PATTERN = re.compile(
    r"\A\ufeff?---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE
)
HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+?)\s*#*\s*$")
FENCE_PATTERN = re.compile(r"^\s{0,3}(`{3,}|~{3,})\s*([\w+#.-]*)")


class FrontmatterError(ValueError):
    """Raised when the frontmatter block is not a valid YAML mapping."""

    def __init__(
        self, message: str, *, line: int | None = None, column: int | None = None
    ) -> None:
        self.line = line
        self.column = column
        super().__init__(message)


def parse_document(source: str) -> ParsedDocument:
    """Split ``source`` into frontmatter, body content and a block outline.

    Raises
    ------
    FrontmatterError
        If the frontmatter is not valid YAML or is not a mapping. ``line`` and
        ``column`` point into ``source`` (1-based) when YAML reports them.
    """
    match = FRONTMATTER_PATTERN.match(source)
    if not match:
        return ParsedDocument(content=source, frontmatter={}, ast=outline(source))

    frontmatter = _load_frontmatter(match.group(1))
    content = source[match.end() :]
    return ParsedDocument(
        content=content, frontmatter=frontmatter, ast=outline(content)
    )


def _load_frontmatter(block: str) -> dict[str, typ.Any]:
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        loaded = loader.load(block)
    except YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        # The opening fence occupies line 1 of the source.
        line = mark.line + 2 if mark is not None else None
        column = mark.column + 1 if mark is not None else None
        msg = f"Invalid frontmatter: {getattr(exc, 'problem', None) or exc}"
        raise FrontmatterError(msg, line=line, column=column) from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        msg = "Frontmatter must be a mapping."
        raise FrontmatterError(msg, line=2, column=1)
    return _string_keys(loaded)


def _string_keys(value: typ.Any) -> typ.Any:
    """Return ``value`` with every mapping key converted to ``str``.

    YAML allows integer, boolean and null keys at any depth; JSON does not.

    >>> _string_keys({"meta": {1: "a", None: [{True: "b"}]}})
    {'meta': {'1': 'a', 'None': [{'True': 'b'}]}}
    """
    if isinstance(value, dict):
        return {str(key): _string_keys(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_string_keys(item) for item in value]
    return value


def outline(content: str) -> list[dict[str, typ.Any]]:
    """Return a flat list of block nodes (headings, code, paragraphs)."""
    nodes: list[dict[str, typ.Any]] = []
    fence: str | None = None
    paragraph = False
    for line in content.splitlines():
        fence_match = FENCE_PATTERN.match(line)
        if fence is not None:
            if fence_match and fence_match.group(1).startswith(fence):
                fence = None
            continue
        if fence_match:
            fence = fence_match.group(1)
            nodes.append({"type": "code", "lang": fence_match.group(2) or None})
            paragraph = False
            continue
        heading = HEADING_PATTERN.match(line)
        if heading:
            depth = len(heading.group(1))
            nodes.append({"type": "heading", "depth": depth, "text": heading.group(2)})
            paragraph = False
        elif not line.strip():
            paragraph = False
        elif not paragraph:
            nodes.append({"type": "paragraph"})
            paragraph = True
    return nodes


__all__ = ["FrontmatterError", "outline", "parse_document"]
