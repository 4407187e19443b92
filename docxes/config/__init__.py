"""Load and validate docxes engine configuration.

This subpackage parses the project's ``docxes.yaml`` file, applies defaults,
and produces typed dataclasses (:class:`EngineConfig`,
:class:`CompilerOptions`, :class:`SitemapConfig`) that the build and read
paths consume. The primary entry point is :func:`load_engine_config`.

Examples
--------
>>> from pathlib import Path
>>> from docxes.config import load_engine_config
>>> config = load_engine_config(Path("config/docxes.yaml"))  # doctest: +SKIP
>>> config.manifest_path  # doctest: +SKIP
PosixPath('.docxes/manifest.json')
"""

from .loader import DEFAULT_CONFIG_PATH, build_engine_config, load_engine_config
from .models import CompilerOptions, EngineConfig, SitemapConfig

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "CompilerOptions",
    "EngineConfig",
    "SitemapConfig",
    "build_engine_config",
    "load_engine_config",
]
