"""Cyclopts CLI entrypoint for building versioned documentation.

The ``docxes`` console script builds the manifest, per-document artifacts,
search index and optional sitemap from a versioned content tree, and can
wipe the cache directory so the next build starts from scratch. Settings
come from ``config/docxes.yaml`` unless ``--config`` (or ``INPUT_CONFIG``)
points elsewhere.

Examples
--------
Run an incremental build with the default configuration:

>>> from docxes.cli import main
>>> main()  # doctest: +SKIP

Force a full rebuild against a custom configuration file:

>>> from docxes.cli import app
>>> app(["build", "--full", "--config", "site/docxes.yaml"])  # doctest: +SKIP
"""

from __future__ import annotations

import asyncio
import logging
import shutil
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .build import BuildOrchestrator
from .config import load_engine_config
from .context import DocsContext
from .errors import BuildError

app = App(name="docxes", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.default
def usage(*tokens: str) -> None:
    """Print usage and exit with status 1 when no known command is given."""
    if tokens:
        print(f"Unknown command: {' '.join(tokens)}", file=sys.stderr)
    print("Usage: docxes [build [--full] | clean]", file=sys.stderr)
    raise SystemExit(1)


@app.command(help="Build the manifest, artifacts and search index.")
def build(
    *,
    config: typ.Annotated[
        Path | None, Parameter(help="Path to engine config", env_var="INPUT_CONFIG")
    ] = None,
    full: typ.Annotated[
        bool, Parameter(help="Ignore stored file hashes and rebuild everything")
    ] = False,
    verbose: typ.Annotated[
        bool, Parameter(help="Log skipped documents and progress")
    ] = False,
) -> None:
    """Build every documentation version.

    Parameters
    ----------
    config : Path or None, optional
        Path to the engine configuration; ``None`` uses
        ``config/docxes.yaml`` when it exists and built-in defaults otherwise.
    full : bool, optional
        Recompile documents even when their digest is unchanged.
    verbose : bool, optional
        Enable debug logging.

    Raises
    ------
    SystemExit
        With status 1 when the build aborts or any document fails.
    """
    _configure_logging(verbose)
    engine_config = load_engine_config(config)
    context = DocsContext(engine_config)
    try:
        report = asyncio.run(BuildOrchestrator(context).build(incremental=not full))
    except BuildError as exc:
        print(f"build failed: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    for path in report.written:
        print(f"wrote {_format_path(path)}")
    print(
        f"{len(report.processed)} processed, {len(report.skipped)} skipped, "
        f"{len(report.failed)} failed"
    )
    for failure in report.failed:
        print(f"failed {failure.key}: {failure.error}", file=sys.stderr)
    if not report.ok:
        raise SystemExit(1)


@app.command(help="Delete the cache directory.")
def clean(
    *,
    config: typ.Annotated[
        Path | None, Parameter(help="Path to engine config", env_var="INPUT_CONFIG")
    ] = None,
) -> None:
    """Remove the cache root so the next build starts from scratch."""
    engine_config = load_engine_config(config)
    cache_root = engine_config.cache_root
    if cache_root.exists():
        shutil.rmtree(cache_root)
        print(f"removed {_format_path(cache_root)}")
    else:
        print(f"nothing to clean at {_format_path(cache_root)}")


def main() -> None:
    """Invoke the Cyclopts application behind the ``docxes`` console command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
