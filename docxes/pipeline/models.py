"""Shared records passed between the pipeline stages."""

from __future__ import annotations

import typing as typ

import msgspec

from ..models import Heading


class ParsedDocument(msgspec.Struct, kw_only=True):
    """Parser output: body content, frontmatter mapping and an opaque AST."""

    content: str
    frontmatter: dict[str, typ.Any] = msgspec.field(default_factory=dict)
    ast: typ.Any = None


class ProcessedMetadata(msgspec.Struct, kw_only=True):
    """Metadata derived while processing a document."""

    frontmatter: dict[str, typ.Any]
    toc: list[Heading]
    ast: typ.Any
    plain_text: str


class ProcessedOutput(msgspec.Struct, kw_only=True):
    """Compiled artifact plus metadata; the unit stored in the content cache."""

    compiled: str
    metadata: ProcessedMetadata


__all__ = ["ParsedDocument", "ProcessedMetadata", "ProcessedOutput"]
