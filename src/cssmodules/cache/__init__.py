"""Process-lifetime transform cache APIs."""

from .store import MEMORY_LIMIT_BYTES, CacheEntry, MemoryProbe, TransformCache, process_rss

__all__ = ["MEMORY_LIMIT_BYTES", "CacheEntry", "MemoryProbe", "TransformCache", "process_rss"]
