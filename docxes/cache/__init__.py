"""Persisted caches: content blobs, file digests, artifacts and lookup tiers."""

from .artifacts import ArtifactStore
from .chain import CacheChain, ComputeTier, Lookup, MappingTier, MemoryTier
from .hashes import HashTracker, content_digest
from .store import ContentStore

__all__ = [
    "ArtifactStore",
    "CacheChain",
    "ComputeTier",
    "ContentStore",
    "HashTracker",
    "Lookup",
    "MappingTier",
    "MemoryTier",
    "content_digest",
]
