"""Load engine configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from ..errors import ConfigError
from .models import MODES, SLUG_MODES, CompilerOptions, EngineConfig, SitemapConfig

DEFAULT_CONFIG_PATH = Path("config/docxes.yaml")


def load_engine_config(path: Path | None = None) -> EngineConfig:
    """Load the YAML configuration describing content and cache locations.

    Parameters
    ----------
    path : Path, optional
        Filesystem path to the YAML file. When ``None``, the default
        ``config/docxes.yaml`` is used if it exists and built-in defaults
        otherwise.

    Returns
    -------
    EngineConfig
        Parsed configuration with defaults applied. Relative paths are
        resolved against the current working directory by the caller.

    Raises
    ------
    FileNotFoundError
        If ``path`` was given explicitly and does not exist.
    ConfigError
        If the YAML is not a mapping or contains unsupported values.

    Examples
    --------
    >>> from docxes.config import load_engine_config
    >>> config = load_engine_config()  # doctest: +SKIP
    >>> config.content_root  # doctest: +SKIP
    PosixPath('content/docs')
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return EngineConfig()
        path = DEFAULT_CONFIG_PATH
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise ConfigError(msg)
    return build_engine_config(loaded)


def build_engine_config(raw: typ.Mapping[str, typ.Any]) -> EngineConfig:
    """Build an EngineConfig from an already-parsed mapping."""
    base = EngineConfig()
    mode = str(raw.get("mode", base.mode))
    if mode not in MODES:
        msg = f"Unknown mode '{mode}'; expected one of {', '.join(MODES)}."
        raise ConfigError(msg)
    slug_mode = str(raw.get("slug_mode", base.slug_mode))
    if slug_mode not in SLUG_MODES:
        expected = ", ".join(SLUG_MODES)
        msg = f"Unknown slug_mode '{slug_mode}'; expected one of {expected}."
        raise ConfigError(msg)

    plugins = raw.get("plugins") or []
    if not isinstance(plugins, list):
        msg = "'plugins' must be a list of 'module:attribute' references."
        raise ConfigError(msg)

    return EngineConfig(
        content_root=Path(raw.get("content_root", base.content_root)),
        cache_root=Path(raw.get("cache_root", base.cache_root)),
        public_dir=Path(raw.get("public_dir", base.public_dir)),
        base_path=_normalize_base_path(raw.get("base_path", base.base_path)),
        mode=mode,
        slug_mode=slug_mode,
        plugins=[str(item) for item in plugins],
        compiler=_build_compiler_options(raw.get("compiler") or {}),
        sitemap=_build_sitemap_config(raw.get("sitemap") or {}),
    )


def _normalize_base_path(value: object) -> str:
    """Return ``value`` with one leading slash and no trailing slash."""
    text = str(value or "").strip().strip("/")
    return f"/{text}" if text else ""


def _build_compiler_options(payload: typ.Mapping[str, typ.Any]) -> CompilerOptions:
    """Build CompilerOptions from the ``compiler`` mapping."""
    if not isinstance(payload, dict):
        msg = "'compiler' must be a mapping."
        raise ConfigError(msg)
    base = CompilerOptions()
    extensions = payload.get("extensions", base.extensions)
    if not isinstance(extensions, list):
        msg = "'compiler.extensions' must be a list."
        raise ConfigError(msg)
    return CompilerOptions(
        pygments_style=str(payload.get("pygments_style", base.pygments_style)),
        highlight=bool(payload.get("highlight", base.highlight)),
        extensions=[str(name) for name in extensions],
    )


def _build_sitemap_config(payload: typ.Mapping[str, typ.Any]) -> SitemapConfig:
    """Build SitemapConfig from the ``sitemap`` mapping."""
    if not isinstance(payload, dict):
        msg = "'sitemap' must be a mapping."
        raise ConfigError(msg)
    base = SitemapConfig()
    site_url = str(payload.get("site_url", base.site_url)).rstrip("/")
    return SitemapConfig(
        enabled=bool(payload.get("enabled", base.enabled)),
        site_url=site_url,
    )


__all__ = ["DEFAULT_CONFIG_PATH", "build_engine_config", "load_engine_config"]
