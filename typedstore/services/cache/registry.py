"""
Process-wide registry of shared memory caches.

Every consumer asking for a cache with the same (key type, value type)
pair receives the same ``MemoryCache`` instance, so values written by one
component are visible to all others.
"""

import threading
from typing import Any, Dict, List, Optional, Tuple

from typedstore.core.config import get_config
from typedstore.services.cache.memory_cache import MemoryCache
from typedstore.utils.logging.structured_logger import StructuredLogger, get_logger
from typedstore.utils.optional import type_name
from typedstore.utils.performance.memory_monitor import MemoryPressureMonitor

RegistryToken = Tuple[Any, Any]


def cache_signature(key_type: Any, value_type: Any) -> str:
    """Printed signature of a cache type pair, for logs and diagnostics."""
    return f"{type_name(key_type)}-{type_name(value_type)}"


class SharedMemoryCache:
    """
    Registry handing out one shared ``MemoryCache`` per type pair.

    Caches are keyed by the ``(key_type, value_type)`` tuple itself rather
    than by printed type names, so distinct types that print alike never
    share a cache. All registry access is serialized through one lock: when
    two threads request a new pair at the same time, exactly one cache is
    created and both receive it.

    Caches live for the lifetime of the process.
    """

    _registry: Dict[RegistryToken, MemoryCache] = {}
    _signatures: Dict[RegistryToken, str] = {}
    _lock = threading.Lock()
    _pressure_monitor: Optional[MemoryPressureMonitor] = None
    _logger: Optional[StructuredLogger] = None

    @classmethod
    def get_cache(cls, key_type: Any, value_type: Any) -> MemoryCache:
        """
        Retrieve or create the shared cache for a key/value type pair.

        Args:
            key_type: Key type of the cache
            value_type: Value type of the cache

        Returns:
            The shared MemoryCache instance for the pair
        """
        token = cls._token(key_type, value_type)

        with cls._lock:
            existing = cls._registry.get(token)
            if existing is not None:
                return existing

            signature = cache_signature(key_type, value_type)
            cache = cls._build_cache(signature)
            cls._registry[token] = cache
            cls._signatures[token] = signature

        cls._get_logger().debug(
            f"Registered shared memory cache '{signature}'",
            service="SharedMemoryCache",
            signature=signature
        )
        return cache

    @classmethod
    def contains(cls, key_type: Any, value_type: Any) -> bool:
        """Check whether a cache exists for a type pair."""
        token = cls._token(key_type, value_type)
        with cls._lock:
            return token in cls._registry

    @classmethod
    def signatures(cls) -> List[str]:
        """Printed signatures of all registered caches."""
        with cls._lock:
            return list(cls._signatures.values())

    @staticmethod
    def _token(key_type: Any, value_type: Any) -> RegistryToken:
        token = (key_type, value_type)
        try:
            hash(token)
        except TypeError:
            # Unhashable type expressions fall back to their printed form
            return (cache_signature(key_type, value_type), None)
        return token

    @classmethod
    def _build_cache(cls, signature: str) -> MemoryCache:
        # Called with the registry lock held
        config = get_config()
        if cls._pressure_monitor is None:
            cls._pressure_monitor = MemoryPressureMonitor(
                warning_threshold=config.memory_warning_threshold,
                critical_threshold=config.memory_critical_threshold,
                check_interval=config.memory_check_interval
            )
        return MemoryCache(
            max_size=config.max_cache_size,
            pressure_monitor=cls._pressure_monitor,
            name=f"MemoryCache[{signature}]"
        )

    @classmethod
    def _get_logger(cls) -> StructuredLogger:
        if cls._logger is None:
            cls._logger = get_logger("shared_memory_cache")
        return cls._logger
