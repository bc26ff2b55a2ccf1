"""
In-memory caching with a shared per-type registry.
"""

from .memory_cache import CacheEntry, MemoryCache
from .registry import SharedMemoryCache, cache_signature

__all__ = ['CacheEntry', 'MemoryCache', 'SharedMemoryCache', 'cache_signature']
