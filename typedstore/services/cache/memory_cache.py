"""
Generic in-memory cache with eviction under memory pressure.

This module provides a thread-safe key-value cache whose entries may
disappear at any time: a bounded size evicts least recently used entries,
and a memory pressure monitor triggers purges when the system runs low on
memory. Callers are never notified of evictions.
"""

import sys
import threading
from collections import OrderedDict
from typing import Generic, Hashable, List, Optional, TypeVar

from typedstore.core.exceptions import CacheError
from typedstore.types.models import CacheOperation, CacheStats, MemoryPressure
from typedstore.utils.performance.memory_monitor import MemoryPressureMonitor

K = TypeVar('K', bound=Hashable)
V = TypeVar('V')


class _CacheKey(Generic[K]):
    """Key wrapper; hash and equality delegate to the wrapped key."""

    __slots__ = ('key', '_hash')

    def __init__(self, key: K, operation: CacheOperation = CacheOperation.GET):
        self.key = key
        try:
            self._hash = hash(key)
        except TypeError as e:
            raise CacheError(
                f"Cache key of type {type(key).__name__} is not hashable",
                cache_key=repr(key),
                operation=operation.name
            ) from e

    def __hash__(self) -> int:
        return self._hash

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _CacheKey):
            return NotImplemented
        return self.key == other.key

    def __repr__(self) -> str:
        return f"_CacheKey({self.key!r})"


class CacheEntry(Generic[V]):
    """
    Stored value wrapper.

    A returned entry proves the key is present even when ``value`` is None.
    """

    __slots__ = ('value',)

    def __init__(self, value: V):
        self.value = value

    def __repr__(self) -> str:
        return f"CacheEntry({self.value!r})"


class MemoryCache(Generic[K, V]):
    """
    Thread-safe in-memory cache.

    Example::

        cache = MemoryCache[str, int]()
        cache["user_id"] = 42
        cache["user_id"]          # 42
        cache["user_id"] = None   # removes the entry

    ``set(key, None)`` stores None as a real entry; only the subscript form
    treats None as removal.

    Attributes:
        max_size (Optional[int]): Entry limit (None for unbounded)
        purge_ratio (float): Fraction of entries purged under WARNING pressure
        pressure_monitor (Optional[MemoryPressureMonitor]): Pressure source
    """

    def __init__(
        self,
        max_size: Optional[int] = None,
        pressure_monitor: Optional[MemoryPressureMonitor] = None,
        purge_ratio: float = 0.2,
        name: Optional[str] = None
    ):
        """
        Initialize a new memory cache.

        Args:
            max_size: Maximum number of entries (None for unbounded)
            pressure_monitor: Monitor consulted on writes (optional)
            purge_ratio: Fraction of entries to purge under WARNING pressure
            name: Name used in repr and diagnostics

        Raises:
            ValueError: If max_size is not positive or purge_ratio not in (0, 1]
        """
        if max_size is not None and max_size <= 0:
            raise ValueError("Max size must be positive")
        if not (0 < purge_ratio <= 1):
            raise ValueError("Purge ratio must be in (0, 1]")

        self.max_size = max_size
        self.purge_ratio = purge_ratio
        self.pressure_monitor = pressure_monitor
        self.name = name or "MemoryCache"
        self._cache: "OrderedDict[_CacheKey[K], CacheEntry[V]]" = OrderedDict()
        self._lock = threading.RLock()

        self._stats = {
            'hits': 0,
            'misses': 0,
            'sets': 0,
            'evictions': 0,
            'pressure_purges': 0
        }

    # Cache management

    def entry(self, key: K) -> Optional[CacheEntry[V]]:
        """
        Get the stored entry for a key.

        Returns:
            The entry wrapper, or None if the key is absent or was evicted
        """
        cache_key = _CacheKey(key)
        with self._lock:
            entry = self._cache.get(cache_key)
            if entry is None:
                self._stats['misses'] += 1
                return None
            self._cache.move_to_end(cache_key)
            self._stats['hits'] += 1
            return entry

    def get(self, key: K) -> Optional[V]:
        """
        Get a value from the cache.

        Returns:
            The cached value, or None if absent or evicted
        """
        entry = self.entry(key)
        return entry.value if entry is not None else None

    def set(self, key: K, value: V) -> None:
        """
        Store a value, replacing any existing entry for the key.

        The entry may be evicted later without notice.
        """
        cache_key = _CacheKey(key, CacheOperation.SET)
        with self._lock:
            self._cache[cache_key] = CacheEntry(value)
            self._cache.move_to_end(cache_key)
            self._stats['sets'] += 1

            if self.max_size is not None and len(self._cache) > self.max_size:
                self._evict(len(self._cache) - self.max_size)

        self._respond_to_pressure()

    def remove(self, key: K) -> None:
        """Remove the entry for a key; no-op when absent."""
        cache_key = _CacheKey(key, CacheOperation.REMOVE)
        with self._lock:
            self._cache.pop(cache_key, None)

    def clear(self) -> int:
        """
        Remove all entries.

        Returns:
            Number of entries removed
        """
        with self._lock:
            count = len(self._cache)
            self._cache.clear()
            return count

    # Eviction

    def _evict(self, count: int) -> int:
        """Evict up to ``count`` least recently used entries."""
        evicted = 0
        with self._lock:
            while evicted < count and self._cache:
                self._cache.popitem(last=False)
                evicted += 1
            self._stats['evictions'] += evicted
        return evicted

    def _respond_to_pressure(self) -> None:
        if self.pressure_monitor is None:
            return

        level = self.pressure_monitor.check()
        if level is MemoryPressure.NORMAL:
            return

        with self._lock:
            # The most recently written entry is never purged
            purgeable = len(self._cache) - 1
            if level is MemoryPressure.CRITICAL:
                to_evict = purgeable
            else:
                to_evict = min(purgeable, int(len(self._cache) * self.purge_ratio))
            if to_evict > 0 and self._evict(to_evict):
                self._stats['pressure_purges'] += 1

    # Subscript access

    def __getitem__(self, key: K) -> Optional[V]:
        """Return the cached value or None; never raises KeyError."""
        return self.get(key)

    def __setitem__(self, key: K, value: Optional[V]) -> None:
        """Store a value; assigning None removes the entry."""
        if value is None:
            self.remove(key)
        else:
            self.set(key, value)

    def __delitem__(self, key: K) -> None:
        self.remove(key)

    def __contains__(self, key: object) -> bool:
        try:
            cache_key = _CacheKey(key)
        except CacheError:
            return False
        with self._lock:
            return cache_key in self._cache

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def keys(self) -> List[K]:
        """Current keys, least recently used first."""
        with self._lock:
            return [cache_key.key for cache_key in self._cache]

    def __repr__(self) -> str:
        return f"<{self.name} entries={len(self)} max_size={self.max_size}>"

    # Statistics

    def get_stats(self) -> CacheStats:
        """Get cache statistics."""
        with self._lock:
            return CacheStats(
                total_entries=len(self._cache),
                hit_count=self._stats['hits'],
                miss_count=self._stats['misses'],
                eviction_count=self._stats['evictions'],
                memory_usage_bytes=self._estimate_memory_usage(),
                max_size=self.max_size
            )

    def _estimate_memory_usage(self) -> int:
        """
        Estimate memory usage in bytes from a sample of up to 100 entries.
        """
        with self._lock:
            overhead = sys.getsizeof(self._cache)
            sample_size = min(100, len(self._cache))
            if sample_size == 0:
                return overhead

            sample = list(self._cache.items())[:sample_size]
            total_sample_size = sum(
                sys.getsizeof(cache_key.key) + sys.getsizeof(entry.value)
                for cache_key, entry in sample
            )
            avg_item_size = total_sample_size / sample_size
            return int(overhead + avg_item_size * len(self._cache))
