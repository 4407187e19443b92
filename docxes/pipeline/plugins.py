"""Ordered plugin hooks applied around parsing and compilation.

A :class:`Plugin` is a name plus a mapping from :class:`HookStage` to a hook
callable. :class:`PluginPipeline` regroups the hooks of an ordered plugin list
into one tagged list per stage and applies each list as a sequential fold:
every hook receives the previous hook's output, and stages a plugin does not
implement are simply absent from that stage's list.

Example
-------
>>> import asyncio
>>> shout = Plugin.define("shout", before_parse=str.upper)
>>> trim = Plugin.define("trim", before_parse=str.strip)
>>> pipeline = PluginPipeline([shout, trim])
>>> asyncio.run(pipeline.run(HookStage.BEFORE_PARSE, "  hi  "))
'HI'
"""

from __future__ import annotations

import dataclasses as dc
import enum
import hashlib
import importlib
import inspect
import typing as typ

from ..errors import ConfigError

Hook = typ.Callable[[typ.Any], typ.Any]


class HookStage(enum.StrEnum):
    """Lifecycle points at which plugins may transform pipeline data."""

    BEFORE_PARSE = "before_parse"
    AFTER_PARSE = "after_parse"
    BEFORE_COMPILE = "before_compile"
    AFTER_RENDER = "after_render"


@dc.dataclass(frozen=True, slots=True)
class Plugin:
    """A named set of stage hooks; hooks may be sync or async callables."""

    name: str
    hooks: typ.Mapping[HookStage, Hook] = dc.field(default_factory=dict)

    @classmethod
    def define(
        cls,
        name: str,
        *,
        before_parse: Hook | None = None,
        after_parse: Hook | None = None,
        before_compile: Hook | None = None,
        after_render: Hook | None = None,
    ) -> Plugin:
        """Build a plugin from keyword hooks, dropping the ones left unset."""
        candidates = {
            HookStage.BEFORE_PARSE: before_parse,
            HookStage.AFTER_PARSE: after_parse,
            HookStage.BEFORE_COMPILE: before_compile,
            HookStage.AFTER_RENDER: after_render,
        }
        return cls(name, {stage: hook for stage, hook in candidates.items() if hook})


class PluginPipeline:
    """Per-stage hook lists built from an ordered plugin list."""

    def __init__(self, plugins: typ.Sequence[Plugin] = ()) -> None:
        self.plugins = tuple(plugins)
        self._stages: dict[HookStage, list[tuple[str, Hook]]] = {
            stage: [
                (plugin.name, plugin.hooks[stage])
                for plugin in self.plugins
                if stage in plugin.hooks
            ]
            for stage in HookStage
        }

    @property
    def names(self) -> list[str]:
        return [plugin.name for plugin in self.plugins]

    def fingerprint(self) -> str:
        """Return a digest of the active plugin names, in order."""
        joined = "\n".join(self.names)
        return hashlib.sha256(joined.encode("utf-8")).hexdigest()[:16]

    async def run(self, stage: HookStage, value: typ.Any) -> typ.Any:
        """Fold ``value`` through every hook registered for ``stage``."""
        for _name, hook in self._stages[stage]:
            value = hook(value)
            if inspect.isawaitable(value):
                value = await value
        return value

    @classmethod
    def from_references(cls, references: typ.Iterable[str]) -> PluginPipeline:
        """Import plugins from ``module:attribute`` references, keeping order.

        Raises
        ------
        ConfigError
            If a reference is malformed, cannot be imported, or does not point
            at a :class:`Plugin`.
        """
        return cls([load_plugin(reference) for reference in references])


def load_plugin(reference: str) -> Plugin:
    """Import the :class:`Plugin` named by ``module:attribute``."""
    module_name, _, attribute = reference.partition(":")
    if not module_name or not attribute:
        msg = f"Plugin reference '{reference}' must look like 'module:attribute'."
        raise ConfigError(msg)
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        msg = f"Cannot import plugin module '{module_name}': {exc}"
        raise ConfigError(msg) from exc
    plugin = getattr(module, attribute, None)
    if not isinstance(plugin, Plugin):
        msg = f"'{reference}' does not reference a docxes Plugin."
        raise ConfigError(msg)
    return plugin


__all__ = ["Hook", "HookStage", "Plugin", "PluginPipeline", "load_plugin"]
