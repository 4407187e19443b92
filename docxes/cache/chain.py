"""Layered lookups: try each cache tier in a fixed order until one hits.

Every tier answers ``lookup(key)`` with a :class:`Lookup`; the chain returns
the first hit and back-fills any :class:`MemoryTier` that came before the
tier that answered.

Example
-------
>>> import asyncio
>>> async def compute(key):
...     return key.upper()
>>> memory = MemoryTier()
>>> chain = CacheChain([memory, ComputeTier(compute)])
>>> asyncio.run(chain.lookup("v1/intro"))
Lookup(hit=True, value='V1/INTRO')
>>> memory.values
{'v1/intro': 'V1/INTRO'}
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

T = typ.TypeVar("T")


@dc.dataclass(frozen=True, slots=True)
class Lookup(typ.Generic[T]):
    """Result of a tier lookup; ``value`` is meaningful only when ``hit``."""

    hit: bool
    value: T | None = None


class CacheTier(typ.Protocol[T]):
    """A single layer of a :class:`CacheChain`."""

    async def lookup(self, key: str) -> Lookup[T]: ...


class MemoryTier(typ.Generic[T]):
    """Process-local dictionary tier."""

    def __init__(self, values: typ.Mapping[str, T] | None = None) -> None:
        self.values: dict[str, T] = dict(values or {})

    async def lookup(self, key: str) -> Lookup[T]:
        if key in self.values:
            return Lookup(hit=True, value=self.values[key])
        return Lookup(hit=False)

    def store(self, key: str, value: T) -> None:
        self.values[key] = value


class MappingTier(typ.Generic[T]):
    """Read-only tier over a loaded mapping, e.g. the manifest ``docs`` map."""

    def __init__(self, values: typ.Mapping[str, T]) -> None:
        self.values = values

    async def lookup(self, key: str) -> Lookup[T]:
        if key in self.values:
            return Lookup(hit=True, value=self.values[key])
        return Lookup(hit=False)


class ComputeTier(typ.Generic[T]):
    """Tier that computes values on demand; ``None`` results are misses."""

    def __init__(self, compute: typ.Callable[[str], typ.Awaitable[T | None]]) -> None:
        self.compute = compute

    async def lookup(self, key: str) -> Lookup[T]:
        value = await self.compute(key)
        if value is None:
            return Lookup(hit=False)
        return Lookup(hit=True, value=value)


class CacheChain(typ.Generic[T]):
    """Ordered list of tiers consulted front to back."""

    def __init__(self, tiers: typ.Sequence[CacheTier[T]]) -> None:
        self.tiers = list(tiers)

    async def lookup(self, key: str) -> Lookup[T]:
        for index, tier in enumerate(self.tiers):
            result = await tier.lookup(key)
            if result.hit:
                for earlier in self.tiers[:index]:
                    if isinstance(earlier, MemoryTier):
                        earlier.store(key, result.value)
                return result
        return Lookup(hit=False)

    async def get(self, key: str) -> T | None:
        """Return the value for ``key`` or ``None`` when every tier misses."""
        return (await self.lookup(key)).value


__all__ = [
    "CacheChain",
    "CacheTier",
    "ComputeTier",
    "Lookup",
    "MappingTier",
    "MemoryTier",
]
