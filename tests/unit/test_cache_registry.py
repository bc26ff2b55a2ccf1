"""
Tests for the shared memory cache registry.
"""

import threading
import unittest
from dataclasses import dataclass
from typing import Dict, List, Optional

from typedstore.services.cache.memory_cache import MemoryCache
from typedstore.services.cache.registry import SharedMemoryCache, cache_signature


@dataclass(frozen=True)
class UserId:
    value: int


class Profile:
    pass


def _make_lookalike():
    # A second class with the same printed name as Profile
    class Profile:
        pass
    Profile.__qualname__ = "Profile"
    return Profile


class TestSharedMemoryCache(unittest.TestCase):
    """Test cases for SharedMemoryCache."""

    def test_same_pair_same_instance(self):
        """Test that a type pair always maps to one cache."""
        first = SharedMemoryCache.get_cache(str, int)
        second = SharedMemoryCache.get_cache(str, int)

        self.assertIsInstance(first, MemoryCache)
        self.assertIs(first, second)
        self.assertTrue(SharedMemoryCache.contains(str, int))

    def test_values_visible_across_consumers(self):
        """Test that a write through one handle is read through another."""
        SharedMemoryCache.get_cache(UserId, str)[UserId(7)] = "Brandon"

        self.assertEqual("Brandon", SharedMemoryCache.get_cache(UserId, str)[UserId(7)])

    def test_distinct_pairs_distinct_caches(self):
        """Test that different type pairs never share a cache."""
        str_int = SharedMemoryCache.get_cache(str, int)
        int_str = SharedMemoryCache.get_cache(int, str)
        str_optional = SharedMemoryCache.get_cache(str, Optional[int])

        self.assertIsNot(str_int, int_str)
        self.assertIsNot(str_int, str_optional)

    def test_lookalike_types_do_not_collide(self):
        """Test that types printing the same name get separate caches."""
        Lookalike = _make_lookalike()
        self.assertEqual(cache_signature(str, Profile), cache_signature(str, Lookalike))

        self.assertIsNot(
            SharedMemoryCache.get_cache(str, Profile),
            SharedMemoryCache.get_cache(str, Lookalike)
        )

    def test_generic_value_types(self):
        """Test parameterized value types as registry keys."""
        cache = SharedMemoryCache.get_cache(str, List[int])

        self.assertIs(cache, SharedMemoryCache.get_cache(str, List[int]))
        self.assertIsNot(cache, SharedMemoryCache.get_cache(str, List[str]))

    def test_concurrent_first_access(self):
        """Test that racing first requests for a pair all get one cache."""
        results = []
        results_lock = threading.Lock()
        barrier = threading.Barrier(8)

        def request():
            barrier.wait()
            cache = SharedMemoryCache.get_cache(str, Dict[str, float])
            with results_lock:
                results.append(cache)

        threads = [threading.Thread(target=request) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(8, len(results))
        self.assertTrue(all(cache is results[0] for cache in results))

    def test_signatures(self):
        """Test the printed signatures of registered caches."""
        SharedMemoryCache.get_cache(str, bytes)

        self.assertEqual("str-bytes", cache_signature(str, bytes))
        self.assertIn("str-bytes", SharedMemoryCache.signatures())
        self.assertEqual("str-Optional[int]", cache_signature(str, Optional[int]))

    def test_cache_uses_configured_size(self):
        """Test that new caches are bounded by the configured size."""
        cache = SharedMemoryCache.get_cache(bytes, bytes)

        self.assertEqual(10000, cache.max_size)
        self.assertIs(SharedMemoryCache._pressure_monitor, cache.pressure_monitor)
