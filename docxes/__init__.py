"""Build engine for versioned Markdown/MDX documentation sites.

The package turns a ``<content-root>/<version>/...`` tree into a navigation
tree, cached compiled documents, a manifest and a flat search index, and
rebuilds incrementally by skipping files whose digest has not changed.

Exports
-------
- ``app``: Cyclopts application exposing ``build`` and ``clean``.
- ``main``: Convenience function that invokes the Cyclopts app.
- ``DocsContext``: read-path queries over a configured content tree.
- ``BuildOrchestrator``: full and incremental builds.

Examples
--------
>>> from docxes import app
>>> app.name[0]
'docxes'
"""

from __future__ import annotations

from .build import BuildOrchestrator, BuildReport
from .cli import app, main
from .context import DocsContext

__all__ = ["BuildOrchestrator", "BuildReport", "DocsContext", "app", "main"]
