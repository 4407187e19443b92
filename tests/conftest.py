"""Shared fixtures for the docxes test suite.

Every test works against a throwaway content tree under ``tmp_path`` and an
:class:`~docxes.config.EngineConfig` whose cache and public directories live
beside it, so builds never touch the working directory.
"""

from __future__ import annotations

import typing as typ

import pytest

from docxes.config import EngineConfig

if typ.TYPE_CHECKING:
    from pathlib import Path


def _write_doc(root: Path, relative: str, body: str, **frontmatter: object) -> Path:
    """Write a Markdown/MDX document, prefixing simple YAML frontmatter."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    header = ""
    if frontmatter:
        lines = [f"{key}: {value}" for key, value in frontmatter.items()]
        header = "---\n" + "\n".join(lines) + "\n---\n"
    path.write_text(header + body, encoding="utf-8")
    return path


@pytest.fixture
def write_doc() -> typ.Callable[..., Path]:
    """Return the document-writing helper used to populate content trees."""
    return _write_doc


@pytest.fixture
def content_root(tmp_path: Path) -> Path:
    """Return an empty content root directory."""
    root = tmp_path / "content" / "docs"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def engine_config(tmp_path: Path, content_root: Path) -> EngineConfig:
    """Return a production-mode configuration rooted in ``tmp_path``."""
    return EngineConfig(
        content_root=content_root,
        cache_root=tmp_path / ".docxes",
        public_dir=tmp_path / "public",
    )


@pytest.fixture
def sample_site(content_root: Path) -> Path:
    """Populate a two-version site with landing pages and nested guides."""
    _write_doc(content_root, "v1/main.mdx", "Welcome to v1.\n", title="Version One")
    _write_doc(content_root, "v1/intro.mdx", "Hello\n", title="Intro", order=1)
    _write_doc(content_root, "v1/guides/main.mdx", "", title="Guides")
    _write_doc(
        content_root,
        "v1/guides/setup.mdx",
        "# Install\n\nRun the installer.\n",
        title="Setup",
        keywords='"install, setup"',
    )
    _write_doc(content_root, "v2/intro.md", "Hello again\n", title="Intro")
    _write_doc(content_root, "v1/.drafts/secret.mdx", "Hidden\n", title="Secret")
    return content_root
