"""
Declarative bindings over the durable store and the shared memory caches.
"""

from .binding import Binding, StorageBinding
from .defaults_storage import DefaultsStorage
from .cache_storage import CacheStorage

__all__ = ['Binding', 'StorageBinding', 'DefaultsStorage', 'CacheStorage']
